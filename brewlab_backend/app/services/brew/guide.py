from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from brewlab_backend.app.schemas import (
    BrewSessionState,
    PlannedStep,
    PrepChecklistItem,
    PromptStyle,
    Recipe,
    RecipeStep,
    RecipeVersion,
)
from .directive import get_directive
from .format import format_seconds, to_ratio_label
from .prep import build_prep_checklist, split_steps
from .scaling import scale_recipe_version
from .session import session_status
from .step_plan import build_step_plan, summarize_step, total_timeline_sec

__all__ = ["BrewGuide", "build_guide_for_version", "build_brew_guide", "describe_session"]


@dataclass
class BrewGuide:
    """Everything derived from one (scaled) version: never stored, rebuilt on demand."""
    version: RecipeVersion
    target_water_grams: float
    target_ratio: float
    prep_steps: List[RecipeStep] = field(default_factory=list)
    brew_steps: List[RecipeStep] = field(default_factory=list)
    checklist: List[PrepChecklistItem] = field(default_factory=list)
    plan: List[PlannedStep] = field(default_factory=list)

    @property
    def total_sec(self) -> int:
        return total_timeline_sec(self.plan)

    @property
    def checklist_size(self) -> int:
        return len(self.checklist)

    def to_dict(self, prompt_style: PromptStyle = PromptStyle.BARISTA) -> Dict[str, Any]:
        return {
            "version": self.version.model_dump(by_alias=True),
            "targetWaterGrams": self.target_water_grams,
            "targetRatio": self.target_ratio,
            "ratioLabel": to_ratio_label(self.version.base_water_grams, self.version.base_dose_grams),
            "checklist": [item.model_dump(by_alias=True) for item in self.checklist],
            "plan": [
                {
                    **planned.model_dump(by_alias=True),
                    "summary": summarize_step(planned),
                    "directive": get_directive(planned, prompt_style),
                }
                for planned in self.plan
            ],
            "totalSec": self.total_sec,
            "totalLabel": format_seconds(self.total_sec),
        }


# What it does:
# Scale (Scaler) -> partition (Prep Classifier) -> schedule (Step Planner) in one call.
def build_guide_for_version(
    version: RecipeVersion,
    target_water_grams: Optional[float] = None,
    target_ratio: Optional[float] = None,
) -> BrewGuide:
    water = version.base_water_grams if target_water_grams is None else target_water_grams
    ratio = (version.base_water_grams / version.base_dose_grams) if target_ratio is None else target_ratio
    scaled = scale_recipe_version(version, water, ratio)

    prep_steps, brew_steps = split_steps(scaled.steps)
    return BrewGuide(
        version=scaled,
        target_water_grams=water,
        target_ratio=ratio,
        prep_steps=prep_steps,
        brew_steps=brew_steps,
        checklist=build_prep_checklist(prep_steps, scaled.steps, scaled.target_temp_c),
        plan=build_step_plan(brew_steps),
    )

def build_brew_guide(
    recipe: Recipe,
    target_water_grams: Optional[float] = None,
    target_ratio: Optional[float] = None,
) -> BrewGuide:
    return build_guide_for_version(recipe.active_version(), target_water_grams, target_ratio)


def describe_session(state: BrewSessionState, guide: BrewGuide, prompt_style: PromptStyle) -> Dict[str, Any]:
    """Read model for one session: state + what to show for the current and next step."""
    plan = guide.plan
    current = plan[state.current_step_index] if state.current_step_index < len(plan) else None
    upcoming = plan[state.current_step_index + 1: state.current_step_index + 4]

    countdown = max(0, current.end_sec - state.elapsed_sec) if current else 0
    progress = (
        min(100.0, max(0, state.elapsed_sec - current.start_sec) / current.duration_sec * 100)
        if current else 0.0
    )
    return {
        "session": state.model_dump(by_alias=True),
        "status": session_status(state).value,
        "checklist": [
            {**item.model_dump(by_alias=True), "checked": bool(state.prep_checks[i]) if i < len(state.prep_checks) else False}
            for i, item in enumerate(guide.checklist)
        ],
        "current": {
            **current.model_dump(by_alias=True),
            "directive": get_directive(current, prompt_style),
            "summary": summarize_step(current),
        } if current and state.prep_ready else None,
        "upcoming": [summarize_step(p) for p in upcoming],
        "countdownSec": countdown,
        "countdownLabel": format_seconds(countdown),
        "elapsedLabel": format_seconds(state.elapsed_sec),
        "progressPct": round(progress, 1),
        "totalSec": guide.total_sec,
    }
