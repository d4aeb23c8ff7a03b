# brewlab_backend/app/services/legacy_cards.py
"""
Legacy brew card importer.

The first catalogue of brew guides lived as loose "cards" (name, image, a
"/"-separated recipe line and numbered free-text instructions). This module turns
those cards into full Recipe / RecipeVersion / RecipeStep values by parsing
quantities, durations and step types out of the text. The result is the seed
catalogue: ids "seed-<slug>", no owner, public.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from brewlab_backend.app.config.paths import resolve_seed_file
from brewlab_backend.app.schemas import (
    BrewStepType,
    Difficulty,
    Recipe,
    RecipeStep,
    RecipeVersion,
    utc_now_iso,
)
from brewlab_backend.app.utils.strings import new_id, slugify
from .brew.format import round_half_up

log = logging.getLogger("brewlab.legacy_cards")
if not log.handlers:
    handler = logging.StreamHandler()
    log.addHandler(handler)
    log.setLevel(logging.INFO)

SEED_TIMESTAMP = "2024-01-01T00:00:00.000Z"
DEFAULT_WATER_G = 350
DEFAULT_DOSE_G = 22
DEFAULT_TEMP_C = 96
GRAMS_PER_CUP = 236.6
GRAMS_PER_TBSP = 5.3

IMAGE_BY_BREWER: Dict[str, str] = {
    "Chemex": "/assets/images/Chemex.png",
    "Clever Dripper": "/assets/images/Clever.png",
    "Aeropress": "/assets/images/AeroPress.png",
    "French Press": "/assets/images/FrenchPress.png",
    "Kalita Wave": "/assets/images/KalitaWave.png",
    "Hario V60": "/assets/images/HarioV60.png",
    "Coffee Brewer": "/assets/images/MrCoffee.png",
}
PRESET_IMAGE_OPTIONS: List[str] = list(IMAGE_BY_BREWER.values())

_WATER_G = re.compile(r"(\d+(?:\.\d+)?)\s*g\s*water", re.IGNORECASE)
_WATER_CUPS = re.compile(r"(\d+(?:\.\d+)?)\s*cups?\s*of\s*water", re.IGNORECASE)
_DOSE_G = re.compile(r"(\d+(?:\.\d+)?)\s*g\s*coffee", re.IGNORECASE)
_DOSE_TBSP = re.compile(r"(\d+(?:\.\d+)?)\s*tablespoons?\s*of\s*coffee", re.IGNORECASE)
_MIN_SEC = re.compile(r"(\d+)\s*:\s*(\d+)")
_MINUTES = re.compile(r"(\d+(?:\.\d+)?)\s*minutes?", re.IGNORECASE)
_SECONDS = re.compile(r"(\d+(?:\.\d+)?)\s*seconds?", re.IGNORECASE)
_TARGET_G = re.compile(r"(\d+(?:\.\d+)?)\s*g\b", re.IGNORECASE)
_TEMP_F = re.compile(r"(\d+)\s*°f", re.IGNORECASE)


# ---------- text parsers ----------

def parse_water(recipe_line: str) -> int:
    m = _WATER_G.search(recipe_line)
    if m:
        return round_half_up(float(m.group(1)))
    m = _WATER_CUPS.search(recipe_line)
    if m:
        return round_half_up(float(m.group(1)) * GRAMS_PER_CUP)
    return DEFAULT_WATER_G

def parse_dose(recipe_line: str) -> int:
    m = _DOSE_G.search(recipe_line)
    if m:
        return round_half_up(float(m.group(1)))
    m = _DOSE_TBSP.search(recipe_line)
    if m:
        return round_half_up(float(m.group(1)) * GRAMS_PER_TBSP)
    return DEFAULT_DOSE_G

def parse_duration_seconds(instruction: str) -> Optional[int]:
    m = _MIN_SEC.search(instruction)
    if m:
        return int(m.group(1)) * 60 + int(m.group(2))
    minutes = _MINUTES.search(instruction)
    seconds = _SECONDS.search(instruction)
    if minutes or seconds:
        total = (float(minutes.group(1)) if minutes else 0) * 60 + (float(seconds.group(1)) if seconds else 0)
        return round_half_up(total)
    return None

def parse_target_water(instruction: str) -> Optional[int]:
    m = _TARGET_G.search(instruction)
    return round_half_up(float(m.group(1))) if m else None

def infer_step_type(instruction: str, index: int) -> BrewStepType:
    lower = instruction.lower()
    if "press" in lower or "plunge" in lower:
        return BrewStepType.PRESS
    if "stir" in lower:
        return BrewStepType.STIR
    if index == 0 or any(k in lower for k in ("heat", "grind", "filter")):
        return BrewStepType.PREP
    if any(k in lower for k in ("wait", "timer", "brew", "drain")):
        return BrewStepType.WAIT
    if any(k in lower for k in ("bloom", "pour", "add", "water")):
        return BrewStepType.POUR
    if any(k in lower for k in ("enjoy", "serve", "decant")):
        return BrewStepType.SERVE
    return BrewStepType.PREP

def infer_difficulty(step_count: int) -> Difficulty:
    if step_count <= 5:
        return Difficulty.EASY
    if step_count <= 7:
        return Difficulty.MEDIUM
    return Difficulty.ADVANCED

def estimate_brew_time_min(steps: List[RecipeStep]) -> int:
    total = sum(s.duration_sec if s.duration_sec is not None else 25 for s in steps)
    return max(2, round_half_up(total / 60))

def parse_target_temp_c(first_instruction: str) -> int:
    m = _TEMP_F.search(first_instruction or "")
    if not m:
        return DEFAULT_TEMP_C
    return round_half_up((int(m.group(1)) - 32) * 5 / 9)

def parse_equipment(recipe_line: str) -> List[str]:
    tokens = [t.strip() for t in recipe_line.split("/") if t.strip()]
    return [
        t for t in tokens
        if "water" not in t.lower() and "coffee" not in t.lower() and not re.search(r"\d", t)
    ]


# ---------- card -> recipe ----------

def _ordered_instructions(instructions: Dict[Any, str]) -> List[str]:
    return [str(instructions[k]) for k in sorted(instructions, key=lambda k: int(k))]

def build_steps(recipe_id: str, version_id: str, instructions: Dict[Any, str]) -> List[RecipeStep]:
    return [
        RecipeStep(
            id=f"{recipe_id}-step-{index + 1}",
            version_id=version_id,
            step_order=index,
            type=infer_step_type(text, index),
            instruction=text,
            target_water_grams=parse_target_water(text),
            duration_sec=parse_duration_seconds(text),
        )
        for index, text in enumerate(_ordered_instructions(instructions))
    ]

def build_version(recipe_id: str, card: Dict[str, Any]) -> RecipeVersion:
    version_id = f"{recipe_id}-v1"
    recipe_line = str(card.get("recipe") or "")
    instructions = card.get("instructions") or {}
    first = next(iter(_ordered_instructions(instructions)), "")
    return RecipeVersion(
        id=version_id,
        recipe_id=recipe_id,
        version_number=1,
        base_water_grams=parse_water(recipe_line),
        base_dose_grams=parse_dose(recipe_line),
        target_temp_c=parse_target_temp_c(first),
        grind_label="Medium",
        notes=recipe_line,
        equipment=parse_equipment(recipe_line),
        steps=build_steps(recipe_id, version_id, instructions),
        created_at=SEED_TIMESTAMP,
    )

def card_to_recipe(card: Dict[str, Any]) -> Recipe:
    name = str(card["name"])
    slug = slugify(name)
    recipe_id = f"seed-{slug}"
    version = build_version(recipe_id, card)
    return Recipe(
        id=recipe_id,
        owner_id=None,
        slug=slug,
        title=name,
        brewer=name,
        description=f"Classic {name} recipe with guided pour and timing targets.",
        quote=str(card.get("quote") or "Brew it your way."),
        cover_image_url=IMAGE_BY_BREWER.get(name, IMAGE_BY_BREWER["Chemex"]),
        is_public=True,
        difficulty=infer_difficulty(len(version.steps)),
        brew_time_min=estimate_brew_time_min(version.steps),
        active_version_id=version.id,
        versions=[version],
        created_at=SEED_TIMESTAMP,
        updated_at=SEED_TIMESTAMP,
    )


# ---------- loading ----------

def load_cards(path: Path) -> List[Dict[str, Any]]:
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    cards = doc.get("cards") if isinstance(doc, dict) else doc
    return [c for c in (cards or []) if isinstance(c, dict) and c.get("name")]

@lru_cache(maxsize=4)
def _seed_recipes_cached(filename: str) -> tuple:
    path = resolve_seed_file(filename)
    if not path.exists():
        log.warning(f"[seed] legacy cards not found at {path}; seed catalogue is empty")
        return ()
    recipes = tuple(card_to_recipe(card) for card in load_cards(path))
    log.info(f"[seed] built {len(recipes)} seed recipes from {path}")
    return recipes

def build_seed_recipes(filename: str = "legacy_cards.yaml") -> List[Recipe]:
    """Seed catalogue; callers get fresh copies so edits never leak into the cache."""
    return [r.model_copy(deep=True) for r in _seed_recipes_cached(filename)]


# ---------- blank draft ----------

def create_blank_recipe(owner_id: str) -> Recipe:
    recipe_id = new_id(12)
    version_id = f"{recipe_id}-v1"
    now = utc_now_iso()

    steps = [
        RecipeStep(
            id=f"{recipe_id}-step-1", version_id=version_id, step_order=0,
            type=BrewStepType.PREP, instruction="Heat water and rinse filter.",
            duration_sec=45, tips="Use hot water to preheat brewer and mug.",
        ),
        RecipeStep(
            id=f"{recipe_id}-step-2", version_id=version_id, step_order=1,
            type=BrewStepType.POUR, instruction="Add water to 60g for bloom.",
            target_water_grams=60, duration_sec=30, tips="Saturate all grounds evenly.",
        ),
        RecipeStep(
            id=f"{recipe_id}-step-3", version_id=version_id, step_order=2,
            type=BrewStepType.POUR, instruction="Continue pouring to final target.",
            target_water_grams=350,
        ),
    ]
    return Recipe(
        id=recipe_id,
        owner_id=owner_id,
        slug=f"recipe-{recipe_id[:6].lower()}",
        title="Untitled Brew Card",
        brewer="Pour Over",
        description="A custom brew recipe built in Coffee Brew Lab.",
        quote="Dial it in and share it.",
        cover_image_url=PRESET_IMAGE_OPTIONS[0],
        is_public=False,
        difficulty=Difficulty.MEDIUM,
        brew_time_min=4,
        active_version_id=version_id,
        versions=[RecipeVersion(
            id=version_id,
            recipe_id=recipe_id,
            version_number=1,
            base_water_grams=350,
            base_dose_grams=22,
            target_temp_c=96,
            grind_label="Medium",
            notes="",
            equipment=["Dripper", "Paper Filter", "Scale", "Timer"],
            steps=steps,
            created_at=now,
        )],
        created_at=now,
        updated_at=now,
    )
