import pytest

from grid_garden.core.config import GameConfig
from grid_garden.simulation.events import GameListener
from grid_garden.world.catalog import CropCatalog, SynergyTable
from grid_garden.world.crops import CropArchetype
from grid_garden.world.grid import GridBoard


SPROUT = CropArchetype("Sprout", 1, 1, 2, 8, 1.0, "#00FF00", "S")
RADISH = CropArchetype("Radish", 1, 1, 0, 10, 1.0, "#FF0000", "R")
OAK = CropArchetype("Oak", 1, 1, 50, 5, 1.0, "#556B2F", "O")
SQUASH = CropArchetype("Squash", 2, 2, 4, 50, 0.4, "#FF7F50", "Q")
VINE = CropArchetype("Vine", 1, 2, 3, 25, 0.8, "#FFD700", "V")


class RecordingListener(GameListener):
    def __init__(self):
        self.events = []

    def on_crop_placed(self, crop):
        self.events.append(("placed", crop))

    def on_forced_advance(self, reason):
        self.events.append(("forced", reason))

    def on_turn_advanced(self, turn):
        self.events.append(("turn", turn))

    def on_harvest(self, report):
        self.events.append(("harvest", report))

    def on_score_changed(self, new_total, delta):
        self.events.append(("score", new_total, delta))

    def on_game_over(self, final_score, stats):
        self.events.append(("game_over", final_score, stats))

    def of(self, kind):
        return [e for e in self.events if e[0] == kind]


def single_crop_config(archetype: CropArchetype, **overrides) -> GameConfig:
    """Config whose catalog holds one archetype, so every draw is predictable."""
    arch = archetype
    table = {arch.name: (arch.width, arch.height, arch.growth_duration, arch.base_value,
                         arch.rarity_weight, arch.color, arch.symbol)}
    return GameConfig(archetypes=table, synergy_pairs=[], **overrides)


@pytest.fixture
def catalog():
    synergies = SynergyTable([("Sprout", "Radish", 4), ("Squash", "Vine", 4)], same_type_bonus=3, default_bonus=1)
    return CropCatalog([SPROUT, RADISH, OAK, SQUASH, VINE], synergies)


@pytest.fixture
def board(catalog):
    return GridBoard(catalog, width=8, height=8)


@pytest.fixture
def listener():
    return RecordingListener()
