# schemas.py  (recipes, versions, steps, share links, brew sessions)

from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple
from pydantic import BaseModel, Field, ConfigDict, conint, confloat, constr
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# Wire format is camelCase; python attributes stay snake_case
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===================== Enums =====================

class BrewStepType(str, Enum):
    PREP = "prep"
    POUR = "pour"
    WAIT = "wait"
    STIR = "stir"
    PRESS = "press"
    SERVE = "serve"

class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    ADVANCED = "Advanced"

class PromptStyle(str, Enum):
    BARISTA = "barista"
    PLAIN = "plain"

class SessionStatus(str, Enum):
    GATED = "gated"                  # prep checklist not acknowledged yet
    READY_PAUSED = "ready-paused"    # gate open, timer never started
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETE = "complete"

class SessionCommand(str, Enum):
    TICK = "tick"
    PAUSE_TOGGLE = "pause_toggle"
    SKIP = "skip"
    BACK = "back"
    RESET = "reset"
    CHECK = "check"                  # toggle one prep checklist item
    ACKNOWLEDGE = "acknowledge"      # open the prep gate
    WATER = "water"                  # scale reading update


# ===================== Recipes =====================

class RecipeStep(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: constr(min_length=1)
    version_id: constr(min_length=1)
    step_order: conint(ge=0)
    type: BrewStepType
    instruction: constr(min_length=2)
    target_water_grams: Optional[confloat(ge=0)] = None   # cumulative grams by end of step
    duration_sec: Optional[conint(ge=0)] = None
    window_start_sec: Optional[conint(ge=0)] = None
    window_end_sec: Optional[conint(ge=0)] = None
    tips: Optional[str] = None

class RecipeVersion(CamelModel):
    id: constr(min_length=1)
    recipe_id: constr(min_length=1)
    version_number: conint(gt=0)
    base_water_grams: confloat(gt=0)
    base_dose_grams: confloat(gt=0)
    target_temp_c: confloat(ge=70, le=100)
    grind_label: constr(min_length=2)
    notes: str = ""
    equipment: List[constr(min_length=1)] = Field(default_factory=list)
    steps: List[RecipeStep] = Field(min_length=1)
    created_at: constr(min_length=1)

class Recipe(CamelModel):
    id: constr(min_length=1)
    owner_id: Optional[str] = None         # None = seed / unclaimed
    slug: constr(min_length=1)
    title: constr(min_length=2)
    brewer: constr(min_length=2)
    description: constr(min_length=4)
    quote: constr(min_length=2)
    cover_image_url: constr(min_length=1)
    is_public: bool
    difficulty: Difficulty
    brew_time_min: conint(gt=0)
    active_version_id: constr(min_length=1)
    versions: List[RecipeVersion] = Field(min_length=1)
    created_at: constr(min_length=1)
    updated_at: constr(min_length=1)

    def active_version(self) -> RecipeVersion:
        for version in self.versions:
            if version.id == self.active_version_id:
                return version
        return self.versions[0]

class ShareLink(CamelModel):
    id: str
    recipe_id: str
    token: str
    published_version_id: str
    created_by: str
    revoked_at: Optional[str] = None
    created_at: str = Field(default_factory=utc_now_iso)


# ===================== Planning =====================

class PlannedStep(CamelModel):
    index: int
    step: RecipeStep
    start_sec: int
    end_sec: int
    duration_sec: int
    prev_pour_target: Optional[float] = None
    pour_delta: Optional[float] = None

class PrepChecklistItem(CamelModel):
    id: str
    instruction: str


# ===================== Sessions =====================

class BrewSessionState(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    recipe_id: str
    recipe_version_id: str
    started_at: str = Field(default_factory=utc_now_iso)
    current_step_index: int = 0
    elapsed_sec: int = 0
    step_elapsed_sec: int = 0
    current_water_grams: float = 0
    is_paused: bool = True
    auto_advance: bool = True
    is_complete: bool = False
    prep_checks: Tuple[bool, ...] = ()
    prep_ready: bool = False
    last_notified_step_id: Optional[str] = None
    notified_step_ids: Tuple[str, ...] = ()

class SessionSnapshot(CamelModel):
    session: BrewSessionState
    target_water_grams: float
    target_ratio: float
    prompt_style: PromptStyle = PromptStyle.BARISTA
    enable_sound_cue: bool = True
    enable_haptic_cue: bool = True
    stored_at: str = Field(default_factory=utc_now_iso)


# ===================== Requests =====================

class ScaleRequest(CamelModel):
    version: RecipeVersion
    target_water_grams: float
    target_ratio: float

class PlanRequest(CamelModel):
    steps: List[RecipeStep]
    target_temp_c: Optional[float] = None
    prompt_style: PromptStyle = PromptStyle.BARISTA

class SessionStartRequest(CamelModel):
    target_water_grams: Optional[float] = None
    target_ratio: Optional[float] = None
    prompt_style: PromptStyle = PromptStyle.BARISTA
    enable_sound_cue: bool = True
    enable_haptic_cue: bool = True
    resume: bool = True

class SessionCommandRequest(CamelModel):
    command: SessionCommand
    item_index: Optional[int] = None      # for CHECK
    grams: Optional[float] = None         # for WATER
    count: conint(ge=1, le=3600) = 1      # repeated TICK

class OwnerRequest(CamelModel):
    owner_id: constr(min_length=1)

class ShareCreateRequest(CamelModel):
    recipe_id: constr(min_length=1)
    owner_id: constr(min_length=1)
