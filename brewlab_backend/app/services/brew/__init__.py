# brewlab_backend/app/services/brew/__init__.py
from .format import format_seconds, to_ratio_label
from .scaling import scale_recipe_version
from .step_plan import build_step_plan, summarize_step, total_timeline_sec
from .prep import build_prep_checklist, is_prep_like_step, split_steps
from .directive import get_directive
from .guide import BrewGuide, build_brew_guide, build_guide_for_version, describe_session

__all__ = [
    "format_seconds", "to_ratio_label",
    "scale_recipe_version",
    "build_step_plan", "summarize_step", "total_timeline_sec",
    "build_prep_checklist", "is_prep_like_step", "split_steps",
    "get_directive",
    "BrewGuide", "build_brew_guide", "build_guide_for_version", "describe_session",
]
