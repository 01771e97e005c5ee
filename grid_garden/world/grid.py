"""The farm grid: placement validation, occupancy, growth and bulk harvest."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from grid_garden.core.config import (
    AGE_BONUS_FACTOR,
    EARLY_HARVEST_PENALTY,
    GRID_HEIGHT,
    GRID_WIDTH,
    SYNERGY_INCLUDES_HARVESTED,
)
from grid_garden.world.catalog import CropCatalog
from grid_garden.world.crops import Crop, CropArchetype


class InvalidPlacement(ValueError):
    """Footprint leaves the board or overlaps a live crop."""

    def __init__(self, archetype: CropArchetype, x: int, y: int) -> None:
        self.archetype = archetype
        self.x = x
        self.y = y
        super().__init__(f"Cannot place {archetype.name} ({archetype.width}x{archetype.height}) at ({x}, {y})")


@dataclass
class HarvestDetail:
    """Score breakdown for one harvested crop."""

    crop: str
    base_score: int
    synergy: int
    position: tuple[int, int]

    @property
    def total(self) -> int:
        return self.base_score + self.synergy


@dataclass
class HarvestReport:
    """Result of one bulk harvest."""

    details: list[HarvestDetail] = field(default_factory=list)
    total: int = 0

    @property
    def has_synergy(self) -> bool:
        return any(d.synergy > 0 for d in self.details)

    @property
    def count(self) -> int:
        return len(self.details)


@dataclass
class BoardStats:
    total: int
    ready: int
    growing: int


class GridBoard:
    """Fixed-size grid owning every crop placed this game."""

    def __init__(
        self,
        catalog: CropCatalog,
        width: int = GRID_WIDTH,
        height: int = GRID_HEIGHT,
        events: Optional["GameListener"] = None,  # noqa: F821
        age_bonus_factor: float = AGE_BONUS_FACTOR,
        early_harvest_penalty: float = EARLY_HARVEST_PENALTY,
        synergy_includes_harvested: bool = SYNERGY_INCLUDES_HARVESTED,
    ) -> None:
        self.catalog = catalog
        self.width = width
        self.height = height
        self.events = events
        self.age_bonus_factor = age_bonus_factor
        self.early_harvest_penalty = early_harvest_penalty
        self.synergy_includes_harvested = synergy_includes_harvested
        self.crops: list[Crop] = []

    # ------------------------------------------------------------------
    # Occupancy queries
    # ------------------------------------------------------------------

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def live_crops(self) -> list[Crop]:
        return [c for c in self.crops if not c.harvested]

    def crop_at(self, x: int, y: int) -> Optional[Crop]:
        """The live crop covering (x, y), if any."""
        for crop in self.crops:
            if not crop.harvested and crop.occupies(x, y):
                return crop
        return None

    def can_place(self, archetype: CropArchetype, x: int, y: int) -> bool:
        if x < 0 or y < 0:
            return False
        if x + archetype.width > self.width or y + archetype.height > self.height:
            return False
        for cx, cy in archetype.footprint_from(x, y):
            if self.crop_at(cx, cy) is not None:
                return False
        return True

    def valid_positions(self, archetype: CropArchetype) -> list[tuple[int, int]]:
        """Every origin where the archetype fits right now, column by column."""
        return [
            (x, y)
            for x in range(self.width)
            for y in range(self.height)
            if self.can_place(archetype, x, y)
        ]

    def can_place_anywhere(self, archetype: CropArchetype) -> bool:
        for x in range(self.width):
            for y in range(self.height):
                if self.can_place(archetype, x, y):
                    return True
        return False

    def occupancy_grid(self) -> np.ndarray:
        """Height x width array: 0 for empty cells, else 1-based index into live_crops()."""
        grid = np.zeros((self.height, self.width), dtype=np.int32)
        for index, crop in enumerate(self.live_crops(), start=1):
            for x, y in crop.occupied_cells():
                grid[y, x] = index
        return grid

    def occupied_area(self) -> int:
        return sum(c.archetype.area for c in self.live_crops())

    def utilization(self) -> float:
        """Fraction of board cells covered by unharvested crops."""
        return self.occupied_area() / (self.width * self.height)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def place(self, archetype: CropArchetype, x: int, y: int, turn_placed: int = 0) -> Crop:
        if not self.can_place(archetype, x, y):
            raise InvalidPlacement(archetype, x, y)
        crop = Crop(archetype=archetype, x=x, y=y, planted_turn=turn_placed)
        self.crops.append(crop)
        if self.events:
            self.events.on_crop_placed(crop)
        return crop

    def advance_all_growth(self) -> None:
        for crop in self.live_crops():
            crop.advance_growth()

    def ready_crops(self) -> list[Crop]:
        return [c for c in self.crops if c.is_ready()]

    def harvest_ready(self) -> HarvestReport:
        """Harvest every ready crop and score it with its adjacency synergy.

        Synergy is measured against the whole pre-sweep collection, so crops
        harvested earlier in this batch still count as neighbours unless
        ``synergy_includes_harvested`` is off.
        """
        report = HarvestReport()
        for crop in self.ready_crops():
            base = crop.harvest(self.age_bonus_factor, self.early_harvest_penalty)
            synergy = self.synergy_for(crop)
            report.details.append(
                HarvestDetail(
                    crop=crop.archetype.name,
                    base_score=base,
                    synergy=synergy,
                    position=crop.position,
                )
            )
            report.total += base + synergy
        return report

    def synergy_for(self, target: Crop) -> int:
        """Sum of pairwise bonuses over every orthogonally adjacent cell pair."""
        target_cells = target.occupied_cells()
        total = 0
        for other in self.crops:
            if other is target:
                continue
            if other.harvested and not self.synergy_includes_harvested:
                continue
            bonus = self.catalog.synergy_bonus(target.archetype, other.archetype)
            for tx, ty in target_cells:
                for ox, oy in other.occupied_cells():
                    if abs(tx - ox) + abs(ty - oy) == 1:
                        total += bonus
        return total

    def sweep_harvested(self) -> int:
        """Drop harvested crops permanently. Returns how many were removed."""
        before = len(self.crops)
        self.crops = [c for c in self.crops if not c.harvested]
        return before - len(self.crops)

    def clear(self) -> None:
        self.crops = []

    def stats(self) -> BoardStats:
        ready = sum(1 for c in self.crops if c.is_ready())
        growing = sum(1 for c in self.crops if not c.harvested and not c.is_ready())
        return BoardStats(total=len(self.crops), ready=ready, growing=growing)
