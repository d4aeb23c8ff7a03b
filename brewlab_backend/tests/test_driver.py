import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

from brewlab_backend.app.schemas import BrewStepType
from brewlab_backend.app.services.brew import build_guide_for_version
from brewlab_backend.app.services.brew.driver import SessionDriver
from brewlab_backend.app.services.brew.session import create_initial_session, pause_toggle

def _guide(make_version, make_step):
    version = make_version(steps=[
        make_step(0, BrewStepType.PREP, "Heat water and rinse filter."),
        make_step(1, BrewStepType.POUR, "Bloom to 60g.", target_water_grams=60, duration_sec=2),
        make_step(2, BrewStepType.WAIT, "Drain.", duration_sec=1),
    ])
    return build_guide_for_version(version)

def _running_state(guide):
    state = create_initial_session("r1", guide.version, 0)
    return pause_toggle(state)

def test_step_fires_notification_once_per_step(make_version, make_step):
    guide = _guide(make_version, make_step)
    fired = []
    driver = SessionDriver(_running_state(guide), guide, notify=fired.append)

    for _ in range(4):
        driver.step()
    driver.close()
    assert driver.state.is_complete
    assert fired == ["s1", "s2"]

def test_slow_sink_does_not_block_ticking(make_version, make_step):
    guide = _guide(make_version, make_step)
    release = threading.Event()
    fired = []

    def slow_sink(step_id):
        release.wait(timeout=5)
        fired.append(step_id)

    driver = SessionDriver(_running_state(guide), guide, notify=slow_sink)
    for _ in range(3):
        driver.step()
    # every tick landed while the first cue is still stuck in the sink
    assert driver.state.is_complete
    assert fired == []

    release.set()
    driver.close()
    assert fired == ["s1", "s2"]

def test_sink_failure_does_not_stop_ticking(make_version, make_step):
    guide = _guide(make_version, make_step)

    def broken(step_id):
        raise RuntimeError("no audio device")

    driver = SessionDriver(_running_state(guide), guide, notify=broken)
    for _ in range(3):
        driver.step()
    driver.close()
    assert driver.state.is_complete

def test_snapshots_are_saved_in_background(make_version, make_step):
    guide = _guide(make_version, make_step)
    saved = []
    driver = SessionDriver(
        _running_state(guide), guide,
        save_snapshot=saved.append,
        executor=ThreadPoolExecutor(max_workers=1),
    )
    driver.step()
    driver.apply("water", grams=25)
    driver.close()
    assert len(saved) == 2
    assert saved[-1].current_water_grams == 25

def test_run_loop_ticks_until_complete(make_version, make_step):
    guide = _guide(make_version, make_step)
    driver = SessionDriver(_running_state(guide), guide, interval=0.001)
    final = asyncio.run(driver.run(max_ticks=50))
    assert final.is_complete
    assert final.elapsed_sec == 3

def test_run_loop_respects_max_ticks(make_version, make_step):
    guide = _guide(make_version, make_step)
    driver = SessionDriver(_running_state(guide), guide, interval=0.001)
    final = asyncio.run(driver.run(max_ticks=1))
    assert final.elapsed_sec == 1 and not final.is_complete
