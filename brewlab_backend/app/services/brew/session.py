"""
Brew session state machine.

Every transition is a pure function: it takes the current BrewSessionState (frozen)
plus the step plan and returns a new state. Nothing here sleeps, schedules or
performs I/O; the periodic driver and the notification sink live in driver.py.

States (see session_status):
    gated -> ready-paused -> running <-> paused -> complete
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from brewlab_backend.app.schemas import (
    BrewSessionState,
    PlannedStep,
    RecipeVersion,
    SessionCommand,
    SessionStatus,
    utc_now_iso,
)

__all__ = [
    "create_initial_session",
    "get_next_step_index",
    "get_prev_step_index",
    "is_timed_step_complete",
    "is_pour_step_complete",
    "update_elapsed",
    "tick",
    "toggle_prep_check",
    "acknowledge_prep",
    "pause_toggle",
    "skip",
    "back",
    "reset",
    "update_water_reading",
    "align_to_plan",
    "session_status",
    "apply_command",
]

Plan = Sequence[PlannedStep]


# ---------- construction ----------

def _fresh_session(
    recipe_id: str,
    version_id: str,
    checklist_size: int,
    started_at: Optional[str] = None,
) -> BrewSessionState:
    return BrewSessionState(
        recipe_id=recipe_id,
        recipe_version_id=version_id,
        started_at=started_at or utc_now_iso(),
        prep_checks=tuple(False for _ in range(checklist_size)),
        prep_ready=checklist_size == 0,
    )

def create_initial_session(
    recipe_id: str,
    version: RecipeVersion,
    checklist_size: int = 0,
    started_at: Optional[str] = None,
) -> BrewSessionState:
    """
    Step 0, zero counters, paused, never complete. The prep gate starts closed unless
    the checklist is empty; an empty plan completes later (acknowledge_prep, align_to_plan, tick).
    """
    return _fresh_session(recipe_id, version.id, checklist_size, started_at)


# ---------- index / threshold helpers ----------

def get_next_step_index(current_step_index: int, step_count: int) -> int:
    return min(step_count - 1, current_step_index + 1)

def get_prev_step_index(current_step_index: int) -> int:
    return max(0, current_step_index - 1)

def is_timed_step_complete(duration_sec: Optional[float], elapsed_sec: float) -> bool:
    if not duration_sec or duration_sec <= 0:
        return False
    return elapsed_sec >= duration_sec

def is_pour_step_complete(target_water_grams: Optional[float], current_water_grams: float) -> bool:
    if not target_water_grams or target_water_grams <= 0:
        return False
    return current_water_grams >= target_water_grams

def update_elapsed(state: BrewSessionState) -> BrewSessionState:
    """Bare counter step: +1 on both counters while running, otherwise unchanged."""
    if state.is_paused or state.is_complete:
        return state
    return state.model_copy(update={
        "elapsed_sec": state.elapsed_sec + 1,
        "step_elapsed_sec": state.step_elapsed_sec + 1,
    })


# ---------- internal moves ----------

def _complete(state: BrewSessionState, **extra) -> BrewSessionState:
    return state.model_copy(update={"is_complete": True, "is_paused": True, **extra})

def _advance(state: BrewSessionState, plan: Plan, *, at_boundary: bool) -> BrewSessionState:
    # Shared by tick (at_boundary=True) and skip
    step_count = len(plan)
    if not step_count:
        return _complete(state)

    current = min(state.current_step_index, step_count - 1)
    next_index = get_next_step_index(current, step_count)
    if next_index == current:
        if at_boundary:
            return _complete(state, step_elapsed_sec=plan[current].duration_sec)
        return _complete(state)

    next_planned = plan[next_index]
    return state.model_copy(update={
        "current_step_index": next_index,
        "step_elapsed_sec": 0,
        # absorb gaps left by explicit windows
        "elapsed_sec": max(state.elapsed_sec, next_planned.start_sec),
    })

def _mark_notified(state: BrewSessionState, step_id: str) -> BrewSessionState:
    if step_id in state.notified_step_ids:
        return state
    return state.model_copy(update={
        "last_notified_step_id": step_id,
        "notified_step_ids": state.notified_step_ids + (step_id,),
    })


# ---------- transitions ----------

def tick(state: BrewSessionState, plan: Plan) -> BrewSessionState:
    """
    One second of wall-clock time. No-op while gated, paused or complete.
    When elapsed reaches the current step's end the step is marked notified
    (once per step id) and the session advances or completes.
    """
    if not state.prep_ready or state.is_paused or state.is_complete:
        return state
    if not plan:
        return _complete(state)

    planned = plan[min(state.current_step_index, len(plan) - 1)]
    counted = state.model_copy(update={
        "elapsed_sec": state.elapsed_sec + 1,
        "step_elapsed_sec": state.step_elapsed_sec + 1,
    })
    if counted.elapsed_sec < planned.end_sec:
        return counted

    counted = _mark_notified(counted, planned.step.id)
    if not state.auto_advance:
        return counted
    return _advance(counted, plan, at_boundary=True)

def toggle_prep_check(state: BrewSessionState, item_index: int) -> BrewSessionState:
    # checklist is locked once acknowledged
    if state.prep_ready or not 0 <= item_index < len(state.prep_checks):
        return state
    checks = list(state.prep_checks)
    checks[item_index] = not checks[item_index]
    return state.model_copy(update={"prep_checks": tuple(checks)})

def acknowledge_prep(state: BrewSessionState, plan: Plan) -> BrewSessionState:
    """Open the gate once every item is checked. The timer stays paused."""
    if state.prep_ready:
        return state
    if not all(state.prep_checks):
        return state
    opened = state.model_copy(update={"prep_ready": True, "is_paused": True})
    if not plan:
        return _complete(opened)
    return opened

def pause_toggle(state: BrewSessionState) -> BrewSessionState:
    if state.is_complete or not state.prep_ready:
        return state
    return state.model_copy(update={"is_paused": not state.is_paused})

def skip(state: BrewSessionState, plan: Plan) -> BrewSessionState:
    if state.is_complete or not state.prep_ready:
        return state
    return _advance(state, plan, at_boundary=False)

def back(state: BrewSessionState, plan: Plan) -> BrewSessionState:
    if not state.prep_ready:
        return state
    prev_index = get_prev_step_index(state.current_step_index)
    start = plan[prev_index].start_sec if prev_index < len(plan) else 0
    return state.model_copy(update={
        "current_step_index": prev_index,
        "step_elapsed_sec": 0,
        "elapsed_sec": start,
        "is_complete": False,
    })

def reset(state: BrewSessionState, checklist_size: int) -> BrewSessionState:
    """Back to step 0, paused, with the prep checklist re-gated from scratch."""
    return _fresh_session(state.recipe_id, state.recipe_version_id, checklist_size)

def update_water_reading(state: BrewSessionState, grams: Optional[float]) -> BrewSessionState:
    try:
        value = max(0.0, float(grams))
    except (TypeError, ValueError):
        return state
    return state.model_copy(update={"current_water_grams": value})

def align_to_plan(state: BrewSessionState, checklist_size: int, plan: Plan) -> BrewSessionState:
    """
    Reconcile a (restored) state with the current plan/checklist:
    a checklist of a different size is re-gated; an index past the plan is clamped
    to the last step with elapsed at the end of the timeline.
    """
    out = state
    if len(out.prep_checks) != checklist_size:
        out = out.model_copy(update={
            "prep_checks": tuple(False for _ in range(checklist_size)),
            "prep_ready": out.prep_ready or checklist_size == 0,
        })

    step_count = len(plan)
    if out.current_step_index >= step_count:
        out = out.model_copy(update={
            "current_step_index": max(0, step_count - 1),
            "elapsed_sec": plan[-1].end_sec if plan else 0,
            "step_elapsed_sec": 0,
            "is_complete": step_count == 0 and out.prep_ready,
        })
    if out.prep_ready and not plan and not out.is_complete:
        out = _complete(out)
    return out

def session_status(state: BrewSessionState) -> SessionStatus:
    if state.is_complete:
        return SessionStatus.COMPLETE
    if not state.prep_ready:
        return SessionStatus.GATED
    if not state.is_paused:
        return SessionStatus.RUNNING
    if state.elapsed_sec == 0 and state.current_step_index == 0:
        return SessionStatus.READY_PAUSED
    return SessionStatus.PAUSED


# ---------- dispatch ----------

def apply_command(
    state: BrewSessionState,
    command: Union[SessionCommand, str],
    plan: Plan,
    checklist_size: int,
    *,
    item_index: Optional[int] = None,
    grams: Optional[float] = None,
) -> BrewSessionState:
    cmd = SessionCommand(command)
    if cmd == SessionCommand.TICK:
        return tick(state, plan)
    if cmd == SessionCommand.PAUSE_TOGGLE:
        return pause_toggle(state)
    if cmd == SessionCommand.SKIP:
        return skip(state, plan)
    if cmd == SessionCommand.BACK:
        return back(state, plan)
    if cmd == SessionCommand.RESET:
        return reset(state, checklist_size)
    if cmd == SessionCommand.CHECK:
        return toggle_prep_check(state, -1 if item_index is None else item_index)
    if cmd == SessionCommand.ACKNOWLEDGE:
        return acknowledge_prep(state, plan)
    if cmd == SessionCommand.WATER:
        return update_water_reading(state, grams)
    raise ValueError(f"unknown session command: {command!r}")
