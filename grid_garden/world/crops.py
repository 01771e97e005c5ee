"""Crop archetypes and placed crops: growth and harvest lifecycle."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from grid_garden.core.config import (
    AGE_BONUS_FACTOR,
    DEFAULT_RARITY_TIER,
    EARLY_HARVEST_PENALTY,
    MIN_HARVEST_SCORE,
    RARITY_TIERS,
)


class GrowthStage(Enum):
    """Display-only growth classification."""

    PLANTED = "Planted"
    GROWING = "Growing"
    MATURE = "Mature"
    HARVESTABLE = "Ready!"


@dataclass(frozen=True)
class CropArchetype:
    """Immutable definition of a crop species."""

    name: str
    width: int
    height: int
    growth_duration: int
    base_value: int
    rarity_weight: float
    color: str = "#9ACD32"
    symbol: str = "?"

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"{self.name}: footprint must be at least 1x1")
        if self.growth_duration < 0:
            raise ValueError(f"{self.name}: growth duration cannot be negative")
        if self.base_value <= 0:
            raise ValueError(f"{self.name}: base value must be positive")
        if self.rarity_weight <= 0:
            raise ValueError(f"{self.name}: rarity weight must be positive")

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def rarity_tier(self) -> str:
        for upper, label in RARITY_TIERS:
            if self.rarity_weight <= upper:
                return label
        return DEFAULT_RARITY_TIER

    def footprint_from(self, x: int, y: int) -> list[tuple[int, int]]:
        """All cells covered when anchored with its top-left corner at (x, y)."""
        return [
            (x + dx, y + dy)
            for dx in range(self.width)
            for dy in range(self.height)
        ]


def base_score_for(
    crop: "Crop",
    age_bonus_factor: float = AGE_BONUS_FACTOR,
    early_penalty: float = EARLY_HARVEST_PENALTY,
) -> int:
    """Base harvest score before synergy, clamped to a minimum of 1."""
    archetype = crop.archetype
    score = archetype.base_value + math.floor(archetype.growth_duration * age_bonus_factor)
    if crop.age < archetype.growth_duration:
        score = math.floor(score * (1.0 - early_penalty))
    return max(MIN_HARVEST_SCORE, score)


@dataclass(eq=False)
class Crop:
    """A crop placed on the board."""

    archetype: CropArchetype
    x: int
    y: int
    planted_turn: int = 0
    age: int = 0
    harvested: bool = False
    _cells: list[tuple[int, int]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._cells = self.archetype.footprint_from(self.x, self.y)

    @property
    def position(self) -> tuple[int, int]:
        return (self.x, self.y)

    def advance_growth(self) -> None:
        """Advance growth by one turn; no-op once mature or harvested."""
        if not self.harvested and self.age < self.archetype.growth_duration:
            self.age += 1

    def is_ready(self) -> bool:
        return self.age >= self.archetype.growth_duration and not self.harvested

    def growth_progress(self) -> float:
        if self.archetype.growth_duration == 0:
            return 1.0
        return min(1.0, self.age / self.archetype.growth_duration)

    def growth_stage(self) -> Optional[GrowthStage]:
        if self.harvested:
            return None
        progress = self.growth_progress()
        if progress >= 1.0:
            return GrowthStage.HARVESTABLE
        elif progress >= 0.75:
            return GrowthStage.MATURE
        elif progress >= 0.25:
            return GrowthStage.GROWING
        return GrowthStage.PLANTED

    def harvest(
        self,
        age_bonus_factor: float = AGE_BONUS_FACTOR,
        early_penalty: float = EARLY_HARVEST_PENALTY,
    ) -> int:
        """Harvest if ready and return the base score, otherwise return 0."""
        if not self.is_ready():
            return 0
        self.harvested = True
        return base_score_for(self, age_bonus_factor, early_penalty)

    def occupied_cells(self) -> list[tuple[int, int]]:
        return list(self._cells)

    def occupies(self, x: int, y: int) -> bool:
        return (
            self.x <= x < self.x + self.archetype.width
            and self.y <= y < self.y + self.archetype.height
        )
