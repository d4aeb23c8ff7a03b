# app/routers/brew.py
from __future__ import annotations
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends

from brewlab_backend.app.deps import get_repository, recipe_or_404
from brewlab_backend.app.schemas import PlanRequest, PromptStyle, ScaleRequest
from brewlab_backend.app.services.brew import (
    build_brew_guide,
    build_prep_checklist,
    build_step_plan,
    get_directive,
    scale_recipe_version,
    split_steps,
    summarize_step,
    total_timeline_sec,
)
from brewlab_backend.app.services.brew.format import format_seconds
from brewlab_backend.app.services.repository import RecipeRepository

router = APIRouter(prefix="/brew", tags=["brew"])

@router.post("/scale")
def scale(req: ScaleRequest) -> Dict[str, Any]:
    """
    Rescale a version to a new water mass / ratio. Inputs are clamped, never rejected.
    """
    scaled = scale_recipe_version(req.version, req.target_water_grams, req.target_ratio)
    return scaled.model_dump(mode="json", by_alias=True)

@router.post("/plan")
def plan(req: PlanRequest) -> Dict[str, Any]:
    """
    Plan an arbitrary step list: prep-like steps go to the checklist, the rest are timed.
    """
    prep_steps, brew_steps = split_steps(req.steps)
    planned = build_step_plan(brew_steps)
    checklist = build_prep_checklist(prep_steps, req.steps, req.target_temp_c or 96)
    total = total_timeline_sec(planned)
    return {
        "checklist": [c.model_dump(by_alias=True) for c in checklist],
        "plan": [
            {
                **p.model_dump(mode="json", by_alias=True),
                "summary": summarize_step(p),
                "directive": get_directive(p, req.prompt_style),
            }
            for p in planned
        ],
        "totalSec": total,
        "totalLabel": format_seconds(total),
    }

@router.get("/{slug}/guide")
def guide(
    slug: str,
    target_water_grams: Optional[float] = None,
    target_ratio: Optional[float] = None,
    prompt_style: PromptStyle = PromptStyle.BARISTA,
    repo: RecipeRepository = Depends(get_repository),
) -> Dict[str, Any]:
    """
    Full brew guide for a recipe's active version, optionally rescaled.
    """
    recipe = recipe_or_404(repo, slug)
    g = build_brew_guide(recipe, target_water_grams, target_ratio)
    return {"recipeId": recipe.id, "title": recipe.title, **g.to_dict(prompt_style)}
