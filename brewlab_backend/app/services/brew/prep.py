from __future__ import annotations
import re
from typing import Dict, List, Sequence, Tuple

from brewlab_backend.app.schemas import BrewStepType, PrepChecklistItem, RecipeStep

__all__ = [
    "HEAT_PREP_PATTERN", "FILTER_PREP_PATTERN",
    "DEFAULT_HEAT_ITEM_ID", "DEFAULT_FILTER_ITEM_ID",
    "is_prep_like_instruction", "is_prep_like_step", "split_steps", "build_prep_checklist",
]

HEAT_PREP_PATTERN = re.compile(r"\b(heat|preheat|boil|kettle|temperature|temp)\b", re.IGNORECASE)
FILTER_PREP_PATTERN = re.compile(r"\b(filter|rinse)\b", re.IGNORECASE)

DEFAULT_HEAT_ITEM_ID = "prep-default-heat-water"
DEFAULT_FILTER_ITEM_ID = "prep-default-filter-placement"


def is_prep_like_instruction(instruction: str) -> bool:
    text = instruction or ""
    return bool(HEAT_PREP_PATTERN.search(text) or FILTER_PREP_PATTERN.search(text))

def is_prep_like_step(step: RecipeStep) -> bool:
    if step.type == BrewStepType.PREP:
        return True
    return is_prep_like_instruction(step.instruction)

def split_steps(steps: Sequence[RecipeStep]) -> Tuple[List[RecipeStep], List[RecipeStep]]:
    """Partition into (prep-like, brew) keeping original order in both."""
    prep: List[RecipeStep] = []
    brew: List[RecipeStep] = []
    for step in steps:
        (prep if is_prep_like_step(step) else brew).append(step)
    return prep, brew


# What it does:
# Build the untimed setup checklist that gates the brew timer.
# Explicit prep-like steps come first (one item per step id), then defaults for
# heating water / placing the filter when no instruction anywhere covers them.
def build_prep_checklist(
    prep_steps: Sequence[RecipeStep],
    all_steps: Sequence[RecipeStep],
    target_temp_c: float,
) -> List[PrepChecklistItem]:
    items: Dict[str, PrepChecklistItem] = {}

    for index, step in enumerate(prep_steps):
        items[step.id] = PrepChecklistItem(
            id=step.id,
            instruction=step.instruction or f"Prep task {index + 1}",
        )

    instructions = [s.instruction or "" for s in prep_steps] + [s.instruction or "" for s in all_steps]
    has_heat_task = any(HEAT_PREP_PATTERN.search(text) for text in instructions)
    has_filter_task = any(FILTER_PREP_PATTERN.search(text) for text in instructions)

    if not has_heat_task:
        items[DEFAULT_HEAT_ITEM_ID] = PrepChecklistItem(
            id=DEFAULT_HEAT_ITEM_ID,
            instruction=f"Heat water to about {target_temp_c:g}°C before brewing.",
        )
    if not has_filter_task:
        items[DEFAULT_FILTER_ITEM_ID] = PrepChecklistItem(
            id=DEFAULT_FILTER_ITEM_ID,
            instruction="Place and rinse your filter before adding coffee.",
        )

    return list(items.values())
