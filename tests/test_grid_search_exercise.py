import random

import pytest

from speedtrainer.core.grid_search_exercise import GridSearchExercise
from speedtrainer.core.models import Difficulty, ExerciseState
from speedtrainer.utils.error_handlers import InvalidConfigurationError


def tap_in_order(engine, step=0.0, clock=None):
    for value in range(1, engine.total_cells + 1):
        if clock is not None and step:
            clock.advance(step)
        assert engine.tap(engine.index_of(value))


def test_grid_is_a_permutation(clock):
    engine = GridSearchExercise(clock, grid_size=7, rng=random.Random(1))
    engine.start()

    assert sorted(engine.grid) == list(range(1, 50))
    assert engine.cell_at(0, 0) == engine.grid[0]
    assert engine.cell_at(6, 6) == engine.grid[48]


def test_single_round_in_order_has_no_mistakes(clock, events):
    engine = GridSearchExercise(clock, grid_size=5, rounds=1, rng=random.Random(42))
    engine.add_listener(events.append)
    engine.start()

    tap_in_order(engine, step=0.4, clock=clock)

    assert engine.state == ExerciseState.COMPLETED
    result = engine.result
    assert result.mistakes == 0
    assert len(result.round_durations) == 1
    assert result.round_durations[0] == pytest.approx(10.0)
    assert result.words_read is None
    assert result.settings.grid_size == 5
    assert result.settings.difficulty == Difficulty.BEGINNER
    assert engine.accuracy == 1.0
    assert [e.type for e in events].count("completed") == 1


def test_wrong_tap_counts_mistake_without_advancing(clock):
    engine = GridSearchExercise(clock, rng=random.Random(7))
    engine.start()

    assert not engine.tap(engine.index_of(2))
    assert engine.mistakes == 1
    assert engine.current_target == 1

    assert engine.tap(engine.index_of(1))
    assert engine.current_target == 2


def test_three_rounds_reshuffle_and_complete(clock):
    engine = GridSearchExercise(clock, grid_size=5, rounds=3, rng=random.Random(3))
    engine.start()

    for expected_round in (1, 2, 3):
        assert engine.current_round == expected_round
        assert sorted(engine.grid) == list(range(1, 26))
        tap_in_order(engine, step=0.2, clock=clock)

    assert engine.state == ExerciseState.COMPLETED
    assert engine.result.units_covered == 3
    assert engine.result.total_units == 3
    assert len(engine.result.round_durations) == 3
    assert engine.result.average_round == pytest.approx(5.0)
    assert engine.result.best_round == pytest.approx(5.0)


def test_paused_time_is_excluded_from_round(clock):
    engine = GridSearchExercise(clock, rng=random.Random(5))
    engine.start()
    clock.advance(2.0)
    engine.pause()

    assert not engine.tap(engine.index_of(1))
    assert engine.mistakes == 0
    clock.advance(100.0)

    engine.resume()
    tap_in_order(engine)

    assert engine.result.round_durations[0] == pytest.approx(2.0)
    assert engine.result.elapsed_seconds == 2


def test_tap_outside_grid_is_ignored(clock):
    engine = GridSearchExercise(clock, rng=random.Random(9))
    engine.start()

    assert not engine.tap(25)
    assert not engine.tap(-1)
    assert engine.mistakes == 0


def test_accuracy_counts_mistakes(clock):
    engine = GridSearchExercise(clock, rng=random.Random(11))
    engine.start()
    for _ in range(5):
        engine.tap(engine.index_of(25))
    tap_in_order(engine)

    assert engine.result.mistakes == 5
    assert engine.accuracy == pytest.approx(0.8)


@pytest.mark.parametrize("kwargs", [{"grid_size": 6}, {"grid_size": 3}, {"rounds": 2}, {"rounds": 0}])
def test_invalid_configuration_is_rejected(clock, kwargs):
    with pytest.raises(InvalidConfigurationError):
        GridSearchExercise(clock, **kwargs)
