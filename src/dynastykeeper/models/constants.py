"""Shared constants for dynasty keeper models.

Placed here so both the domain layer (core/) and the API layer can import
them without creating a layer violation.
"""

from __future__ import annotations

# Weeks 0-14 regular season, 15 conference championship, 16 Army-Navy,
# 17-20 bowl weeks. Week 21 exists only as the "Final Poll" label.
SCHEDULE_LENGTH = 21
FINAL_POLL_WEEK = 21

POLL_SIZE = 25

# Opponent placeholders that mark an open week rather than a real game.
BYE_OPPONENTS: frozenset[str] = frozenset({"BYE", "NONE"})

# Current-year fallback when the stored pointer is missing or nonsensical.
FALLBACK_YEAR = 2024
MIN_VALID_YEAR = 1901

WEEK_DISPLAY_NAMES: dict[int, str] = {
    15: "Conf. Champ",
    16: "Army-Navy",
    17: "Bowl Week 1",
    18: "Bowl Week 2",
    19: "Bowl Week 3",
    20: "Bowl Week 4",
    21: "Final Poll",
}
