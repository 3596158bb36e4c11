"""Experience awarded to the winning player creature.

The result is reported with the final turn; applying it to the permanent
creature record is left to whoever persists battle results.
"""
from __future__ import annotations
import math

MIN_LEVEL = 1
MAX_LEVEL = 100

def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(int(level), MAX_LEVEL))

def experience_for_victory(winner_level: int, loser_level: int) -> int:
    winner_level = clamp_level(winner_level)
    loser_level = clamp_level(loser_level)
    # loser_level * 10 * max(0.5, 1 + gap * 0.1), kept in integer tenths
    gap = loser_level - winner_level
    return math.floor(loser_level * 10 * max(5, 10 + gap) / 10)

__all__ = ["experience_for_victory", "clamp_level"]
