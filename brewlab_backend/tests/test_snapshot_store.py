import datetime as dt

import pytest

from brewlab_backend.app.config.paths import get_seed_dir
from brewlab_backend.app.schemas import BrewSessionState, SessionSnapshot
from brewlab_backend.app.services.data_stores import atomic_write, drop_snapshot, load_snapshot, save_snapshot

def _snapshot(**session):
    return SessionSnapshot(
        session=BrewSessionState(recipe_id="r1", recipe_version_id="v1", **session),
        target_water_grams=500,
        target_ratio=15,
    )

def test_save_and_resume(tmp_data_tree):
    path = save_snapshot("r1", _snapshot(elapsed_sec=42, current_step_index=2))
    assert path.parent == (tmp_data_tree / "sessions").resolve()

    snap = load_snapshot("r1")
    assert snap.session.elapsed_sec == 42
    assert snap.session.current_step_index == 2
    assert snap.target_water_grams == 500

def test_stale_snapshot_reads_as_absent():
    save_snapshot("r1", _snapshot())
    now = dt.datetime.now(dt.timezone.utc)
    assert load_snapshot("r1", now=now + dt.timedelta(hours=23)) is not None
    assert load_snapshot("r1", now=now + dt.timedelta(hours=24, seconds=1)) is None

def test_missing_or_corrupt_snapshot(tmp_data_tree):
    assert load_snapshot("nobody") is None
    (tmp_data_tree / "sessions").mkdir(parents=True, exist_ok=True)
    (tmp_data_tree / "sessions" / "broken.json").write_text("{not json", encoding="utf-8")
    assert load_snapshot("broken") is None

def test_last_write_wins_and_drop():
    save_snapshot("r1", _snapshot(elapsed_sec=1))
    save_snapshot("r1", _snapshot(elapsed_sec=9))
    assert load_snapshot("r1").session.elapsed_sec == 9
    assert drop_snapshot("r1") is True
    assert drop_snapshot("r1") is False
    assert load_snapshot("r1") is None

def test_seed_dir_is_read_only():
    with pytest.raises(AssertionError):
        atomic_write(get_seed_dir() / "scratch.json", "{}")
