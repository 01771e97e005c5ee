"""Crop catalog: weighted archetype draws and pairwise synergy lookup."""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np
from numpy.random import Generator

from grid_garden.core.config import (
    CROP_ARCHETYPES,
    DEFAULT_SYNERGY,
    SAME_TYPE_SYNERGY,
    SYNERGY_PAIRS,
    GameConfig,
)
from grid_garden.world.crops import CropArchetype


class SynergyTable:
    """Symmetric bonus lookup keyed by an unordered pair of archetype names."""

    def __init__(
        self,
        pairs: Optional[list[tuple[str, str, int]]] = None,
        same_type_bonus: int = SAME_TYPE_SYNERGY,
        default_bonus: int = DEFAULT_SYNERGY,
    ) -> None:
        if default_bonus <= 0:
            raise ValueError("Adjacency must always be worth something; default bonus must be positive")
        self.same_type_bonus = same_type_bonus
        self.default_bonus = default_bonus
        self._pairs: dict[frozenset[str], int] = {}
        for a, b, bonus in pairs if pairs is not None else SYNERGY_PAIRS:
            self.set(a, b, bonus)

    def set(self, a: str, b: str, bonus: int) -> None:
        if a == b:
            raise ValueError(f"Same-type synergy is fixed, cannot set pair ({a}, {a})")
        self._pairs[frozenset((a, b))] = bonus

    def bonus(self, a: str, b: str) -> int:
        if a == b:
            return self.same_type_bonus
        return self._pairs.get(frozenset((a, b)), self.default_bonus)

    def __len__(self) -> int:
        return len(self._pairs)


class CropCatalog:
    """Static table of crop archetypes plus their synergy table."""

    def __init__(
        self,
        archetypes: list[CropArchetype],
        synergies: Optional[SynergyTable] = None,
    ) -> None:
        if not archetypes:
            raise ValueError("Catalog needs at least one archetype")
        self._archetypes: dict[str, CropArchetype] = {}
        for arch in archetypes:
            if arch.name in self._archetypes:
                raise ValueError(f"Duplicate archetype name: {arch.name}")
            self._archetypes[arch.name] = arch
        self.synergies = synergies or SynergyTable()

        weights = np.array([a.rarity_weight for a in self._archetypes.values()], dtype=np.float64)
        self._probabilities = weights / weights.sum()

    @classmethod
    def from_config(cls, config: Optional[GameConfig] = None) -> "CropCatalog":
        """Build the catalog from a GameConfig (defaults to the module constants)."""
        table = config.archetypes if config else CROP_ARCHETYPES
        archetypes = [
            CropArchetype(name, w, h, growth, value, weight, color, symbol)
            for name, (w, h, growth, value, weight, color, symbol) in table.items()
        ]
        if config:
            synergies = SynergyTable(
                config.synergy_pairs, config.same_type_synergy, config.default_synergy,
            )
        else:
            synergies = SynergyTable()
        return cls(archetypes, synergies)

    @property
    def names(self) -> list[str]:
        return list(self._archetypes)

    def get(self, name: str) -> CropArchetype:
        return self._archetypes[name]

    def probability(self, name: str) -> float:
        """Chance a single draw returns this archetype."""
        index = self.names.index(name)
        return float(self._probabilities[index])

    def weighted_random_archetype(self, rng: Generator) -> CropArchetype:
        """Draw one archetype with probability proportional to its rarity weight."""
        index = rng.choice(len(self._probabilities), p=self._probabilities)
        return list(self._archetypes.values())[int(index)]

    def synergy_bonus(self, a: CropArchetype, b: CropArchetype) -> int:
        return self.synergies.bonus(a.name, b.name)

    def __iter__(self) -> Iterator[CropArchetype]:
        return iter(self._archetypes.values())

    def __len__(self) -> int:
        return len(self._archetypes)

    def __contains__(self, name: object) -> bool:
        return name in self._archetypes
