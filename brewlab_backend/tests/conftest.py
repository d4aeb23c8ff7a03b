from __future__ import annotations
import os
import tempfile

import pytest

# DATA_DIR must point somewhere disposable before the app module is imported
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="brewlab-data-"))

from fastapi.testclient import TestClient

from brewlab_backend.app.schemas import BrewStepType, RecipeStep, RecipeVersion
from brewlab_backend.app.services.data_stores import LocalRecipeStore
from brewlab_backend.app.services.repository import RecipeRepository


# --- Data tree override: every test gets its own DATA_DIR ---
@pytest.fixture(autouse=True)
def tmp_data_tree(tmp_path, monkeypatch):
    tree = tmp_path / "data_tree"
    monkeypatch.setenv("DATA_DIR", str(tree))
    return tree

@pytest.fixture
def repo(tmp_data_tree):
    return RecipeRepository(LocalRecipeStore(tmp_data_tree / "recipes"))

@pytest.fixture
def client(repo):
    from brewlab_backend.app.main import create_app
    return TestClient(create_app(repository=repo))


# --- Step / version builders ---
@pytest.fixture
def make_step():
    def _make(
        index: int,
        type: BrewStepType = BrewStepType.POUR,
        instruction: str = "Pour slowly in circles.",
        **extra,
    ) -> RecipeStep:
        return RecipeStep(
            id=f"s{index}",
            version_id="v1",
            step_order=index,
            type=type,
            instruction=instruction,
            **extra,
        )
    return _make

@pytest.fixture
def make_version(make_step):
    def _make(steps=None, water: float = 300, dose: float = 20, temp: float = 94) -> RecipeVersion:
        return RecipeVersion(
            id="v1",
            recipe_id="r1",
            version_number=1,
            base_water_grams=water,
            base_dose_grams=dose,
            target_temp_c=temp,
            grind_label="Medium",
            steps=steps or [
                make_step(0, BrewStepType.PREP, "Heat water and rinse filter."),
                make_step(1, instruction="Bloom to 60g.", target_water_grams=60, duration_sec=30),
                make_step(2, instruction="Pour to 300g.", target_water_grams=300, duration_sec=60),
            ],
            created_at="2024-01-01T00:00:00+00:00",
        )
    return _make
