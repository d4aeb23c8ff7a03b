from __future__ import annotations
from typing import Optional, Union

from brewlab_backend.app.schemas import BrewStepType, PlannedStep, PromptStyle
from .format import format_seconds

__all__ = ["get_directive"]

_BARISTA_BY_TYPE = {
    BrewStepType.WAIT: "Barista cue: hands off. Let it settle until {end}.",
    BrewStepType.PREP: "Barista cue: prep quickly and lock in by {end}.",
    BrewStepType.STIR: "Barista cue: one gentle stir, then hold to {end}.",
    BrewStepType.PRESS: "Barista cue: press evenly and finish by {end}.",
    BrewStepType.SERVE: "Barista cue: pour and serve. Step wraps at {end}.",
}
_BARISTA_DEFAULT = "Barista cue: follow this step through {end}."


def _grams(value: float) -> str:
    return f"{value:g}"

def _pour_text(planned: PlannedStep) -> Optional[str]:
    target = planned.step.target_water_grams
    if target is None or target <= 0:
        return None
    if planned.pour_delta and planned.pour_delta > 0:
        return f"add {_grams(planned.pour_delta)}g more water (to {_grams(target)}g total)"
    return f"bring total water to {_grams(target)}g"


def get_directive(planned: PlannedStep, prompt_style: Union[PromptStyle, str] = PromptStyle.BARISTA) -> str:
    """Coaching sentence for the current step, always citing when the cue changes."""
    style = PromptStyle(prompt_style)
    end = format_seconds(planned.end_sec)
    pour_text = _pour_text(planned)
    step_type = planned.step.type

    if style == PromptStyle.PLAIN:
        if pour_text:
            return f"Now {pour_text}, then switch at {end}."
        if step_type in (BrewStepType.WAIT, BrewStepType.PREP):
            return f"Hold this step until {end}."
        return f"Complete this move before {end}."

    if pour_text:
        return f"Barista cue: {pour_text}. Next cue at {end}."
    return _BARISTA_BY_TYPE.get(step_type, _BARISTA_DEFAULT).format(end=end)
