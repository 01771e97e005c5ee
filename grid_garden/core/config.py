"""All tunable constants for Grid Garden.

Every magic number in the codebase must reference this file. ``GameConfig``
bundles them so a single game can override any value without touching the
module globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# =============================================================================
# BOARD
# =============================================================================
GRID_WIDTH: int = 8
GRID_HEIGHT: int = 8

# =============================================================================
# TURNS / ACTIONS
# =============================================================================
MAX_TURNS: int = 20
BASE_ACTIONS_PER_TURN: int = 3
BONUS_ACTION_WINDOW: int = 5     # turns remaining at which the extra action kicks in
BONUS_ACTIONS: int = 1
QUEUE_LENGTH: int = 3            # upcoming crops shown after the active one

# Delay before an automatically triggered end of turn (0 = run immediately)
AUTO_END_TURN_DELAY_MS: float = 0.0
INTERACTIVE_AUTO_END_TURN_DELAY_MS: float = 500.0

# =============================================================================
# CROP ARCHETYPES
# name -> (width, height, growth turns, base value, rarity weight, color, symbol)
# =============================================================================
CROP_ARCHETYPES: dict[str, tuple[int, int, int, int, float, str, str]] = {
    "Wheat": (1, 1, 2, 10, 1.0, "#F5DEB3", "W"),
    "Corn": (1, 2, 3, 25, 0.8, "#FFD700", "C"),
    "Pumpkin": (2, 2, 4, 50, 0.4, "#FF7F50", "P"),
    "Carrot": (1, 1, 0, 15, 0.9, "#FFA500", "K"),
    "Berry Bush": (2, 1, 3, 30, 0.6, "#8A2BE2", "B"),
}

# Rarity tiers by weight upper bound (checked in order)
RARITY_TIERS: list[tuple[float, str]] = [
    (0.4, "Legendary"),
    (0.6, "Rare"),
    (0.8, "Uncommon"),
]
DEFAULT_RARITY_TIER: str = "Common"

# =============================================================================
# HARVEST SCORING
# =============================================================================
AGE_BONUS_FACTOR: float = 1.5          # points per growth turn
EARLY_HARVEST_PENALTY: float = 0.5     # fraction lost when harvested before maturity
MIN_HARVEST_SCORE: int = 1

# =============================================================================
# SYNERGY
# =============================================================================
SAME_TYPE_SYNERGY: int = 3
DEFAULT_SYNERGY: int = 1
SYNERGY_PAIRS: list[tuple[str, str, int]] = [
    ("Wheat", "Corn", 5),
    ("Carrot", "Berry Bush", 6),
    ("Pumpkin", "Wheat", 4),
    ("Corn", "Pumpkin", 4),
]
# Crops harvested earlier in the same batch still count as neighbours
SYNERGY_INCLUDES_HARVESTED: bool = True

# =============================================================================
# END GAME
# =============================================================================
# turns remaining -> score multiplier
ENDGAME_MULTIPLIERS: dict[int, float] = {
    3: 1.2,
    2: 1.5,
    1: 1.8,
    0: 2.0,
}

# (minimum utilization, bonus points), highest first
EFFICIENCY_TIERS: list[tuple[float, int]] = [
    (0.90, 100),
    (0.75, 60),
    (0.60, 30),
    (0.45, 10),
]

# =============================================================================
# PERSISTENCE
# =============================================================================
HIGH_SCORE_FILE: str = "grid_garden_highscore.json"
HIGH_SCORE_KEY: str = "grid_garden_high_score"

# =============================================================================
# DASHBOARD
# =============================================================================
DASHBOARD_CELL_SIZE: float = 1.0
DASHBOARD_UPDATE_INTERVAL: int = 1  # redraw every N turns


@dataclass
class GameConfig:
    """Per-game overrides for the module constants."""

    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    max_turns: int = MAX_TURNS
    base_actions_per_turn: int = BASE_ACTIONS_PER_TURN
    bonus_action_window: int = BONUS_ACTION_WINDOW
    bonus_actions: int = BONUS_ACTIONS
    queue_length: int = QUEUE_LENGTH
    auto_end_turn_delay_ms: float = AUTO_END_TURN_DELAY_MS
    archetypes: dict[str, tuple[int, int, int, int, float, str, str]] = field(
        default_factory=lambda: dict(CROP_ARCHETYPES)
    )
    age_bonus_factor: float = AGE_BONUS_FACTOR
    early_harvest_penalty: float = EARLY_HARVEST_PENALTY
    same_type_synergy: int = SAME_TYPE_SYNERGY
    default_synergy: int = DEFAULT_SYNERGY
    synergy_pairs: list[tuple[str, str, int]] = field(
        default_factory=lambda: list(SYNERGY_PAIRS)
    )
    synergy_includes_harvested: bool = SYNERGY_INCLUDES_HARVESTED
    endgame_multipliers: dict[int, float] = field(
        default_factory=lambda: dict(ENDGAME_MULTIPLIERS)
    )
    efficiency_tiers: list[tuple[float, int]] = field(
        default_factory=lambda: list(EFFICIENCY_TIERS)
    )

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Board must be at least 1x1, got {self.width}x{self.height}")
        if self.max_turns < 1:
            raise ValueError(f"max_turns must be positive, got {self.max_turns}")
        if self.base_actions_per_turn < 1:
            raise ValueError("base_actions_per_turn must be positive")
        if self.queue_length < 1:
            raise ValueError("queue_length must be positive")
        if not self.archetypes:
            raise ValueError("At least one crop archetype is required")
        # Tiers are evaluated highest threshold first
        self.efficiency_tiers = sorted(self.efficiency_tiers, key=lambda t: -t[0])

    @property
    def cell_count(self) -> int:
        return self.width * self.height
