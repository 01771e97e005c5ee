"""Plain-text rendering of the board for the terminal front end."""

from __future__ import annotations

from grid_garden.core.config import DEFAULT_RARITY_TIER
from grid_garden.world.crops import CropArchetype, GrowthStage

_STAGE_SUFFIX = {
    GrowthStage.PLANTED: ".",
    GrowthStage.GROWING: "o",
    GrowthStage.MATURE: "O",
    GrowthStage.HARVESTABLE: "*",
}


def render_board_text(board: "GridBoard") -> str:  # noqa: F821
    """One two-character cell per grid square: crop symbol + growth mark."""
    occupancy = board.occupancy_grid()
    live = board.live_crops()

    header = "   " + "".join(f"{x:<2}" for x in range(board.width))
    lines = [header]
    for y in range(board.height):
        row = []
        for x in range(board.width):
            index = int(occupancy[y, x])
            if index == 0:
                row.append("··")
                continue
            crop = live[index - 1]
            stage = crop.growth_stage()
            row.append(crop.archetype.symbol + (_STAGE_SUFFIX[stage] if stage else " "))
        lines.append(f"{y:>2} " + "".join(row))
    return "\n".join(lines)


def describe_archetype(archetype: CropArchetype, preview_value: int) -> str:
    growth = "Instant" if archetype.growth_duration == 0 else f"{archetype.growth_duration} turns"
    tier = archetype.rarity_tier
    rarity = "" if tier == DEFAULT_RARITY_TIER else f" ({tier})"
    return (
        f"{archetype.name}{rarity} [{archetype.symbol}]  "
        f"Size: {archetype.width}x{archetype.height} | Growth: {growth} | Value: {preview_value} pts"
    )
