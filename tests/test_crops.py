import pytest

from grid_garden.world.crops import Crop, CropArchetype, GrowthStage, base_score_for

from conftest import OAK, RADISH, SPROUT, SQUASH


def test_growth_advances_then_caps():
    """Age climbs one per turn and stops at the growth duration."""
    crop = Crop(SPROUT, 0, 0)
    crop.advance_growth()
    assert crop.age == 1
    crop.advance_growth()
    assert crop.age == 2
    for _ in range(5):
        crop.advance_growth()
    assert crop.age == 2


def test_harvested_crop_does_not_grow():
    crop = Crop(OAK, 0, 0)
    crop.harvested = True
    crop.advance_growth()
    assert crop.age == 0


def test_instant_crop_is_ready_on_placement():
    crop = Crop(RADISH, 3, 3)
    assert crop.is_ready()
    assert crop.growth_stage() is GrowthStage.HARVESTABLE


def test_harvest_before_ready_is_noop():
    """Harvesting a growing crop returns 0 and changes nothing."""
    crop = Crop(SPROUT, 0, 0)
    assert crop.harvest() == 0
    assert not crop.harvested
    assert crop.age == 0


def test_harvest_at_most_once():
    crop = Crop(SPROUT, 0, 0)
    crop.advance_growth()
    crop.advance_growth()
    assert crop.harvest() == 11
    assert crop.harvested
    assert crop.harvest() == 0
    assert crop.harvested
    assert not crop.is_ready()


def test_base_score_adds_age_bonus():
    crop = Crop(SQUASH, 0, 0, age=4)
    assert base_score_for(crop) == 50 + 6


def test_early_harvest_penalty_and_floor():
    """An immature crop scores half, rounded down."""
    crop = Crop(SQUASH, 0, 0, age=1)
    assert base_score_for(crop) == (56 * 5) // 10


def test_base_score_never_below_one():
    tiny = CropArchetype("Moss", 1, 1, 1, 1, 1.0)
    crop = Crop(tiny, 0, 0)
    assert base_score_for(crop, early_penalty=1.0) == 1


def test_growth_stage_thresholds():
    crop = Crop(SQUASH, 0, 0)
    stages = []
    for _ in range(5):
        stages.append(crop.growth_stage())
        crop.advance_growth()
    assert stages == [
        GrowthStage.PLANTED,
        GrowthStage.GROWING,
        GrowthStage.GROWING,
        GrowthStage.MATURE,
        GrowthStage.HARVESTABLE,
    ]
    crop.harvest()
    assert crop.growth_stage() is None


def test_occupied_cells_cover_footprint():
    bush = CropArchetype("Berry Bush", 2, 1, 3, 30, 0.6)
    crop = Crop(bush, 3, 4)
    assert sorted(crop.occupied_cells()) == [(3, 4), (4, 4)]
    assert crop.occupies(4, 4)
    assert not crop.occupies(5, 4)
    assert not crop.occupies(3, 5)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(width=0, height=1, growth_duration=1, base_value=1, rarity_weight=1.0),
        dict(width=1, height=1, growth_duration=-1, base_value=1, rarity_weight=1.0),
        dict(width=1, height=1, growth_duration=1, base_value=0, rarity_weight=1.0),
        dict(width=1, height=1, growth_duration=1, base_value=1, rarity_weight=0.0),
    ],
)
def test_invalid_archetype_rejected(kwargs):
    with pytest.raises(ValueError):
        CropArchetype("Bad", **kwargs)


def test_rarity_tiers():
    def tier(weight):
        return CropArchetype("X", 1, 1, 1, 1, weight).rarity_tier

    assert tier(0.4) == "Legendary"
    assert tier(0.6) == "Rare"
    assert tier(0.8) == "Uncommon"
    assert tier(1.0) == "Common"
