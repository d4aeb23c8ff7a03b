import pytest

from brewlab_backend.app.schemas import BrewStepType, SessionCommand, SessionStatus
from brewlab_backend.app.services.brew import build_step_plan
from brewlab_backend.app.services.brew.session import (
    acknowledge_prep,
    align_to_plan,
    apply_command,
    back,
    create_initial_session,
    get_next_step_index,
    get_prev_step_index,
    is_pour_step_complete,
    is_timed_step_complete,
    pause_toggle,
    reset,
    session_status,
    skip,
    tick,
    toggle_prep_check,
    update_elapsed,
    update_water_reading,
)


@pytest.fixture
def plan(make_step):
    # s0: 0..3, s1: 3..5
    return build_step_plan([
        make_step(0, BrewStepType.POUR, "Bloom to 60g.", target_water_grams=60, duration_sec=3),
        make_step(1, BrewStepType.WAIT, "Let it drain.", duration_sec=2),
    ])

@pytest.fixture
def running(make_version, plan):
    state = create_initial_session("r1", make_version(), 0)
    return pause_toggle(state)

def _ticks(state, plan, n):
    for _ in range(n):
        state = tick(state, plan)
    return state


def test_initial_session_is_gated_and_paused(make_version, plan):
    state = create_initial_session("r1", make_version(), 2)
    assert state.current_step_index == 0
    assert state.elapsed_sec == 0 and state.step_elapsed_sec == 0
    assert state.is_paused and not state.prep_ready
    assert state.prep_checks == (False, False)
    assert session_status(state) == SessionStatus.GATED
    assert tick(state, plan) is state
    assert pause_toggle(state) is state
    assert skip(state, plan) is state

def test_empty_checklist_opens_gate(make_version, plan):
    state = create_initial_session("r1", make_version(), 0)
    assert state.prep_ready
    assert session_status(state) == SessionStatus.READY_PAUSED

def test_new_session_is_never_complete(make_version, plan):
    state = create_initial_session("r1", make_version())
    assert not state.is_complete
    assert state.prep_ready and state.is_paused
    running = _ticks(pause_toggle(state), plan, 3)
    assert running.current_step_index == 1
    assert running.elapsed_sec == 3

def test_prep_only_recipe_completes_once_aligned(make_version):
    state = create_initial_session("r1", make_version(), 0)
    assert not state.is_complete
    done = align_to_plan(state, 0, [])
    assert done.is_complete
    assert session_status(done) == SessionStatus.COMPLETE

    gated = create_initial_session("r1", make_version(), 1)
    opened = acknowledge_prep(toggle_prep_check(gated, 0), [])
    assert opened.is_complete

def test_acknowledge_requires_every_item(make_version, plan):
    state = create_initial_session("r1", make_version(), 2)
    state = toggle_prep_check(state, 0)
    assert acknowledge_prep(state, plan) is state

    state = toggle_prep_check(state, 1)
    opened = acknowledge_prep(state, plan)
    assert opened.prep_ready and opened.is_paused
    assert session_status(opened) == SessionStatus.READY_PAUSED
    # locked once acknowledged
    assert toggle_prep_check(opened, 0) is opened
    # out of range is ignored
    assert toggle_prep_check(state, 7) is state

def test_tick_advances_and_completes(running, plan):
    assert session_status(running) == SessionStatus.RUNNING
    state = _ticks(running, plan, 2)
    assert (state.current_step_index, state.elapsed_sec, state.step_elapsed_sec) == (0, 2, 2)

    state = tick(state, plan)
    assert state.current_step_index == 1
    assert state.step_elapsed_sec == 0
    assert state.elapsed_sec == 3
    assert state.last_notified_step_id == "s0"

    state = _ticks(state, plan, 2)
    assert state.is_complete and state.is_paused
    assert state.current_step_index == 1
    assert state.step_elapsed_sec == 2
    assert state.elapsed_sec == 5
    assert state.notified_step_ids == ("s0", "s1")
    assert tick(state, plan) is state

def test_step_is_notified_once(running, plan):
    state = _ticks(running, plan, 5)
    assert state.is_complete

    state = back(state, plan)
    assert not state.is_complete
    assert state.current_step_index == 0 and state.elapsed_sec == 0
    state = _ticks(pause_toggle(state), plan, 3)
    assert state.current_step_index == 1
    assert state.notified_step_ids == ("s0", "s1")
    assert state.last_notified_step_id == "s1"

def test_manual_advance_stays_on_step(running, plan):
    state = running.model_copy(update={"auto_advance": False})
    state = _ticks(state, plan, 4)
    assert state.current_step_index == 0
    assert state.elapsed_sec == 4
    assert state.notified_step_ids == ("s0",)

def test_paused_tick_is_noop(running, plan):
    paused = pause_toggle(tick(running, plan))
    assert session_status(paused) == SessionStatus.PAUSED
    assert tick(paused, plan) is paused

def test_skip_and_back(running, plan):
    state = skip(running, plan)
    assert state.current_step_index == 1
    assert state.elapsed_sec == 3 and state.step_elapsed_sec == 0

    done = skip(state, plan)
    assert done.is_complete
    assert skip(done, plan) is done
    assert pause_toggle(done) is done

    state = back(state, plan)
    assert state.current_step_index == 0 and state.elapsed_sec == 0
    assert back(state, plan).current_step_index == 0

def test_reset_regates(running, plan):
    state = reset(_ticks(running, plan, 4), 1)
    assert state.current_step_index == 0 and state.elapsed_sec == 0
    assert state.is_paused and not state.prep_ready
    assert state.prep_checks == (False,)
    assert state.notified_step_ids == ()

def test_water_reading(running):
    assert update_water_reading(running, 42.5).current_water_grams == 42.5
    assert update_water_reading(running, -3).current_water_grams == 0
    assert update_water_reading(running, "abc") is running

def test_align_clamps_restored_state(running, plan):
    drifted = running.model_copy(update={"current_step_index": 5, "prep_checks": (True,)})
    aligned = align_to_plan(drifted, 0, plan)
    assert aligned.current_step_index == 1
    assert aligned.elapsed_sec == 5
    assert aligned.prep_checks == ()
    assert aligned.prep_ready

def test_apply_command_dispatch(make_version, plan):
    state = create_initial_session("r1", make_version(), 1)
    state = apply_command(state, SessionCommand.CHECK, plan, 1, item_index=0)
    state = apply_command(state, "acknowledge", plan, 1)
    state = apply_command(state, "pause_toggle", plan, 1)
    state = apply_command(state, "tick", plan, 1)
    state = apply_command(state, "water", plan, 1, grams=30)
    assert state.elapsed_sec == 1
    assert state.current_water_grams == 30
    with pytest.raises(ValueError):
        apply_command(state, "brew-harder", plan, 1)

def test_index_and_threshold_helpers():
    assert get_next_step_index(0, 3) == 1
    assert get_next_step_index(2, 3) == 2
    assert get_prev_step_index(0) == 0
    assert get_prev_step_index(2) == 1
    assert is_timed_step_complete(30, 30)
    assert not is_timed_step_complete(30, 29)
    assert not is_timed_step_complete(None, 100)
    assert not is_timed_step_complete(0, 100)
    assert is_pour_step_complete(150, 151)
    assert not is_pour_step_complete(150, 149)
    assert not is_pour_step_complete(None, 500)

def test_update_elapsed_counts_only_while_running(running, make_version, plan):
    moved = update_elapsed(running)
    assert (moved.elapsed_sec, moved.step_elapsed_sec) == (1, 1)
    paused = create_initial_session("r1", make_version(), 0)
    assert update_elapsed(paused) is paused

def test_explicit_window_gap_is_absorbed(make_version, make_step):
    windowed = build_step_plan([
        make_step(0, BrewStepType.POUR, "Bloom to 50g.", target_water_grams=50, window_start_sec=0, window_end_sec=2),
        make_step(1, BrewStepType.POUR, "Pour to 250g.", target_water_grams=250, window_start_sec=10, window_end_sec=12),
    ])
    state = pause_toggle(create_initial_session("r1", make_version(), 0))

    state = _ticks(state, windowed, 2)
    assert state.current_step_index == 1
    assert state.elapsed_sec == 10
    assert state.step_elapsed_sec == 0

    state = _ticks(state, windowed, 2)
    assert state.is_complete
    assert state.elapsed_sec == 12
    assert state.notified_step_ids == ("s0", "s1")

    skipped = skip(pause_toggle(create_initial_session("r1", make_version(), 0)), windowed)
    assert (skipped.current_step_index, skipped.elapsed_sec) == (1, 10)

def test_skip_then_back_does_not_renotify(running, plan):
    state = _ticks(running, plan, 3)
    assert state.current_step_index == 1
    assert state.notified_step_ids == ("s0",)

    state = back(state, plan)
    state = skip(state, plan)
    assert state.current_step_index == 1 and state.elapsed_sec == 3
    state = back(state, plan)
    assert state.current_step_index == 0 and state.elapsed_sec == 0

    state = _ticks(state, plan, 3)
    assert state.current_step_index == 1
    assert state.notified_step_ids == ("s0",)
    assert state.last_notified_step_id == "s0"

    state = _ticks(state, plan, 2)
    assert state.is_complete
    assert state.notified_step_ids == ("s0", "s1")
