from __future__ import annotations
from typing import List, Optional, Sequence

from brewlab_backend.app.schemas import BrewStepType, PlannedStep, RecipeStep
from .format import format_seconds

__all__ = ["POUR_FALLBACK_SEC", "DEFAULT_FALLBACK_SEC", "build_step_plan", "summarize_step", "total_timeline_sec"]

POUR_FALLBACK_SEC = 18
DEFAULT_FALLBACK_SEC = 30


def _non_negative(value: Optional[float]) -> Optional[float]:
    return value if isinstance(value, (int, float)) and value >= 0 else None


# What it does:
# Turn an ordered list of brew steps into a contiguous timeline in one forward pass.
# Each step starts at its explicit window start or where the previous one ended, and ends at
# (first available) explicit window end > start + duration > next step's window start > fallback.
# Every step lasts at least one second, so the cursor strictly advances.
def build_step_plan(steps: Sequence[RecipeStep]) -> List[PlannedStep]:
    """
    Returns one PlannedStep per input step, in input order. Pour deltas are measured
    against the last pour target seen so far (cumulative targets -> increments).
    """
    plan: List[PlannedStep] = []
    cursor = 0
    last_pour_target: Optional[float] = None

    for index, step in enumerate(steps):
        next_step = steps[index + 1] if index + 1 < len(steps) else None

        explicit_start = _non_negative(step.window_start_sec)
        start_sec = int(explicit_start) if explicit_start is not None else cursor

        explicit_end = _non_negative(step.window_end_sec)
        duration = _non_negative(step.duration_sec)
        next_start = _non_negative(next_step.window_start_sec) if next_step else None

        fallback = POUR_FALLBACK_SEC if step.type == BrewStepType.POUR else DEFAULT_FALLBACK_SEC
        if explicit_end is not None:
            raw_end = explicit_end
        elif duration is not None:
            raw_end = start_sec + duration
        elif next_start is not None and next_start > start_sec:
            raw_end = next_start
        else:
            raw_end = start_sec + fallback
        end_sec = int(max(start_sec + 1, raw_end))

        target = _non_negative(step.target_water_grams)
        pour_delta = max(0, target - (last_pour_target or 0)) if target is not None else None

        plan.append(PlannedStep(
            index=index,
            step=step,
            start_sec=start_sec,
            end_sec=end_sec,
            duration_sec=end_sec - start_sec,
            prev_pour_target=last_pour_target,
            pour_delta=pour_delta,
        ))

        if target is not None:
            last_pour_target = target
        cursor = end_sec

    return plan


def total_timeline_sec(plan: Sequence[PlannedStep]) -> int:
    return plan[-1].end_sec if plan else 0


def _grams(value: float) -> str:
    return f"{value:g}"

def summarize_step(planned: PlannedStep) -> str:
    """One-line timeline label, e.g. "00:45 · POUR · +90g · 150g total"."""
    step = planned.step
    parts = [format_seconds(planned.start_sec), step.type.value.upper()]
    target = _non_negative(step.target_water_grams)
    if target is not None:
        if planned.pour_delta:
            parts.append(f"+{_grams(planned.pour_delta)}g")
        parts.append(f"{_grams(target)}g total")
    return " · ".join(parts)
