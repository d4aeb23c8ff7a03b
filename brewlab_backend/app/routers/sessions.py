# app/routers/sessions.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from brewlab_backend.app.deps import get_repository, recipe_or_404
from brewlab_backend.app.schemas import (
    Recipe,
    SessionCommand,
    SessionCommandRequest,
    SessionSnapshot,
    SessionStartRequest,
)
from brewlab_backend.app.services.brew import BrewGuide, build_brew_guide, describe_session
from brewlab_backend.app.services.brew.driver import SessionDriver
from brewlab_backend.app.services.brew.session import align_to_plan, create_initial_session
from brewlab_backend.app.services.data_stores import drop_snapshot, load_snapshot, save_snapshot
from brewlab_backend.app.services.repository import RecipeRepository

router = APIRouter(prefix="/sessions", tags=["sessions"])
log = logging.getLogger("brewlab.sessions")

# Directory: ./data/sessions/  (one snapshot per recipe, 24h freshness)

def _guide_for(recipe: Recipe, snap: SessionSnapshot) -> BrewGuide:
    return build_brew_guide(recipe, snap.target_water_grams, snap.target_ratio)

def _payload(snap: SessionSnapshot, guide: BrewGuide, notified: Optional[List[str]] = None) -> Dict[str, Any]:
    return {
        **describe_session(snap.session, guide, snap.prompt_style),
        "targetWaterGrams": snap.target_water_grams,
        "targetRatio": snap.target_ratio,
        "promptStyle": snap.prompt_style.value,
        "enableSoundCue": snap.enable_sound_cue,
        "enableHapticCue": snap.enable_haptic_cue,
        "notified": notified or [],
    }

def _restore_or_404(recipe: Recipe) -> SessionSnapshot:
    snap = load_snapshot(recipe.id)
    if snap is None or snap.session.recipe_version_id != recipe.active_version_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no active session for this recipe")
    return snap

# What it does:
# Start (or resume) the guided session for a recipe. A fresh snapshot for the same
# version is resumed when resume=true; anything else starts cold at step 0, paused.
@router.post("/{slug}/start")
def start_session(slug: str, req: SessionStartRequest, repo: RecipeRepository = Depends(get_repository)):
    recipe = recipe_or_404(repo, slug)
    previous = load_snapshot(recipe.id) if req.resume else None
    if previous is not None and previous.session.recipe_version_id == recipe.active_version_id:
        guide = _guide_for(recipe, previous)
        snap = previous.model_copy(update={
            "session": align_to_plan(previous.session, guide.checklist_size, guide.plan),
        })
        log.info(f"[sessions] resumed {recipe.id} at step {snap.session.current_step_index}")
    else:
        guide = build_brew_guide(recipe, req.target_water_grams, req.target_ratio)
        state = align_to_plan(
            create_initial_session(recipe.id, guide.version, guide.checklist_size),
            guide.checklist_size,
            guide.plan,
        )
        snap = SessionSnapshot(
            session=state,
            target_water_grams=guide.target_water_grams,
            target_ratio=guide.target_ratio,
            prompt_style=req.prompt_style,
            enable_sound_cue=req.enable_sound_cue,
            enable_haptic_cue=req.enable_haptic_cue,
        )
        log.info(f"[sessions] started {recipe.id}")
    save_snapshot(recipe.id, snap)
    return _payload(snap, guide)

@router.get("/{slug}")
def get_session(slug: str, repo: RecipeRepository = Depends(get_repository)):
    recipe = recipe_or_404(repo, slug)
    snap = _restore_or_404(recipe)
    return _payload(snap, _guide_for(recipe, snap))

# What it does:
# Apply one command (tick repeats `count` times) through the session driver,
# persist the result and report which steps crossed their end this call.
@router.post("/{slug}/command")
def command_session(slug: str, req: SessionCommandRequest, repo: RecipeRepository = Depends(get_repository)):
    recipe = recipe_or_404(repo, slug)
    snap = _restore_or_404(recipe)
    guide = _guide_for(recipe, snap)

    start = align_to_plan(snap.session, guide.checklist_size, guide.plan)
    driver = SessionDriver(start, guide)
    repeats = req.count if req.command == SessionCommand.TICK else 1
    for _ in range(repeats):
        before = driver.state
        driver.apply(req.command, item_index=req.item_index, grams=req.grams)
        if driver.state is before:
            break

    # each step id is notified at most once, so the new ids are exactly this call's cues
    notified = [sid for sid in driver.state.notified_step_ids if sid not in start.notified_step_ids]
    snap = snap.model_copy(update={"session": driver.state})
    save_snapshot(recipe.id, snap)
    return _payload(snap, guide, notified)

@router.delete("/{slug}")
def end_session(slug: str, repo: RecipeRepository = Depends(get_repository)):
    recipe = recipe_or_404(repo, slug)
    return {"ok": True, "dropped": drop_snapshot(recipe.id)}
