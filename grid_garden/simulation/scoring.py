"""Scoring policy: end-game multipliers and the space-efficiency bonus."""

from __future__ import annotations

import math
from typing import Optional

from grid_garden.core.config import EFFICIENCY_TIERS, ENDGAME_MULTIPLIERS


def endgame_multiplier(
    turns_remaining: int, table: Optional[dict[int, float]] = None
) -> float:
    """Multiplier for points scored with this many turns left (1.0 outside the window)."""
    table = ENDGAME_MULTIPLIERS if table is None else table
    return table.get(turns_remaining, 1.0)


def apply_endgame_multiplier(
    points: int, turns_remaining: int, table: Optional[dict[int, float]] = None
) -> int:
    multiplier = endgame_multiplier(turns_remaining, table)
    if multiplier == 1.0:
        return points
    return math.floor(points * multiplier)


def efficiency_bonus(
    utilization: float, tiers: Optional[list[tuple[float, int]]] = None
) -> int:
    """One-time bonus for how much of the board is still planted at game end."""
    tiers = EFFICIENCY_TIERS if tiers is None else tiers
    for threshold, bonus in sorted(tiers, key=lambda t: -t[0]):
        if utilization >= threshold:
            return bonus
    return 0
