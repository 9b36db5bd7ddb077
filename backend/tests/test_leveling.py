import pytest

from services.leveling import LEVEL_THRESHOLDS, level_for, level_name, level_progress, round_half_up


@pytest.mark.parametrize("xp, level, name", [
    (0, 1, "Seed"),
    (99, 1, "Seed"),
    (100, 2, "Sprout"),
    (249, 2, "Sprout"),
    (250, 3, "Sapling"),
    (4999, 9, "Ancient Tree"),
    (30000, 15, "Constellation"),
    (10 ** 7, 15, "Constellation"),
])
def test_level_for(xp, level, name):
    assert level_for(xp) == (level, name)


def test_thresholds_strictly_ascending():
    xps = [xp for _, xp, _ in LEVEL_THRESHOLDS]
    assert xps[0] == 0
    assert all(a < b for a, b in zip(xps, xps[1:]))


def test_level_is_monotonic_in_xp():
    levels = [level_for(xp)[0] for xp in range(0, 31000, 50)]
    assert levels == sorted(levels)


def test_round_half_up():
    assert round_half_up(21.5) == 22
    assert round_half_up(22.5) == 23
    assert round_half_up(22.4) == 22
    assert round_half_up(0) == 0


def test_unknown_level_name():
    assert level_name(3) == "Sapling"
    assert level_name(16) == "Legend"
    assert level_name(0) == "Legend"


def test_level_progress_zero_state():
    assert level_progress(0) == {"level": 1, "level_name": "Seed", "xp_to_next_level": 100, "xp_progress": 0}


def test_level_progress_mid_level():
    progress = level_progress(175)
    assert progress["level"] == 2
    assert progress["xp_to_next_level"] == 250
    assert progress["xp_progress"] == 50


def test_level_progress_at_max_level():
    progress = level_progress(45000)
    assert progress["level"] == 15
    assert progress["xp_to_next_level"] == 30000
    assert progress["xp_progress"] == 100
