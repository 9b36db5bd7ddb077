"""
leveling.py — XP to level mapping
Pure functions over an ascending threshold table. Level saturates at the
table's last entry no matter how much XP accumulates.
"""

import math

# (level, xp_required, name)
LEVEL_THRESHOLDS = (
    (1, 0, "Seed"),
    (2, 100, "Sprout"),
    (3, 250, "Sapling"),
    (4, 500, "Growing"),
    (5, 800, "Blooming"),
    (6, 1200, "Flourishing"),
    (7, 1800, "Thriving"),
    (8, 2500, "Mighty Oak"),
    (9, 3500, "Ancient Tree"),
    (10, 5000, "Forest"),
    (11, 7000, "Mountain Sage"),
    (12, 10000, "Summit Walker"),
    (13, 15000, "Sky Dancer"),
    (14, 20000, "Star Weaver"),
    (15, 30000, "Constellation"),
)

MAX_LEVEL = LEVEL_THRESHOLDS[-1][0]
FALLBACK_LEVEL_NAME = "Legend"

_BY_LEVEL = {level: (xp_required, name) for level, xp_required, name in LEVEL_THRESHOLDS}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (round(22.5) == 23)."""
    return int(math.floor(value + 0.5))


def level_for(xp: int) -> tuple[int, str]:
    """Highest level whose threshold does not exceed xp."""
    level, name = LEVEL_THRESHOLDS[0][0], LEVEL_THRESHOLDS[0][2]
    for lvl, xp_required, lvl_name in LEVEL_THRESHOLDS:
        if xp >= xp_required:
            level, name = lvl, lvl_name
        else:
            break
    return level, name


def level_name(level: int) -> str:
    entry = _BY_LEVEL.get(level)
    return entry[1] if entry else FALLBACK_LEVEL_NAME


def xp_required(level: int) -> int:
    """Threshold of a level; levels past the table report the top threshold."""
    entry = _BY_LEVEL.get(level)
    return entry[0] if entry else LEVEL_THRESHOLDS[-1][1]


def level_progress(xp: int) -> dict:
    """
    Progress within the current level.
    xp_to_next_level is the absolute threshold of the next level (the current
    threshold at the max level). xp_progress is a 0-100 percentage, pinned to
    100 at the max level.
    """
    level, name = level_for(xp)
    current_threshold = xp_required(level)
    if level >= MAX_LEVEL:
        next_threshold = current_threshold
        progress = 100
    else:
        next_threshold = xp_required(level + 1)
        xp_into_level = xp - current_threshold
        xp_for_next_level = next_threshold - current_threshold
        progress = round_half_up(100 * xp_into_level / xp_for_next_level)
    return {
        "level": level,
        "level_name": name,
        "xp_to_next_level": next_threshold,
        "xp_progress": max(0, min(100, progress)),
    }
