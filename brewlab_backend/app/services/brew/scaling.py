from __future__ import annotations
import math
from typing import Any

from brewlab_backend.app.schemas import RecipeVersion
from .format import round_half_up

__all__ = ["scale_recipe_version"]


def _as_number(value: Any, floor: float) -> float:
    # Non-numeric, NaN and negative inputs collapse to the floor
    try:
        num = float(value)
    except (TypeError, ValueError):
        return floor
    if math.isnan(num) or math.isinf(num):
        return floor
    return max(floor, num)


# What it does:
# Rescale a version to a new total water mass and brew ratio.
# - base water is rounded and floored at 1 g
# - dose follows from water / ratio (ratio floored at 1)
# - every pour target scales by new water / old water; steps without a target are untouched
def scale_recipe_version(version: RecipeVersion, target_water_grams: Any, target_ratio: Any) -> RecipeVersion:
    target_water = max(1, round_half_up(_as_number(target_water_grams, 1)))
    ratio = _as_number(target_ratio, 1)
    scaled_dose = max(1, round_half_up(target_water / ratio))
    factor = target_water / max(1, version.base_water_grams)

    steps = [
        step.model_copy(update={"target_water_grams": round_half_up(step.target_water_grams * factor)})
        if step.target_water_grams is not None else step
        for step in version.steps
    ]
    return version.model_copy(update={
        "base_water_grams": target_water,
        "base_dose_grams": scaled_dose,
        "steps": steps,
    })
