"""Turn system for the game: turn counter and per-turn action budget."""

from grid_garden.core.config import (
    BASE_ACTIONS_PER_TURN,
    BONUS_ACTION_WINDOW,
    BONUS_ACTIONS,
    MAX_TURNS,
)


class TurnClock:
    """Tracks the current turn and how many placements it still allows."""

    def __init__(
        self,
        max_turns: int = MAX_TURNS,
        base_actions: int = BASE_ACTIONS_PER_TURN,
        bonus_window: int = BONUS_ACTION_WINDOW,
        bonus_actions: int = BONUS_ACTIONS,
    ) -> None:
        self.max_turns = max_turns
        self.base_actions = base_actions
        self.bonus_window = bonus_window
        self.bonus_actions = bonus_actions
        self.current_turn: int = 0
        self.actions_used: int = 0
        self.actions_allowed: int = self._allowed_for_current_turn()

    @property
    def turns_remaining(self) -> int:
        return self.max_turns - self.current_turn

    @property
    def actions_left(self) -> int:
        return max(0, self.actions_allowed - self.actions_used)

    @property
    def is_final_stretch(self) -> bool:
        return self.turns_remaining <= self.bonus_window

    @property
    def is_finished(self) -> bool:
        return self.current_turn >= self.max_turns

    def actions_exhausted(self) -> bool:
        return self.actions_used >= self.actions_allowed

    def use_action(self) -> None:
        self.actions_used += 1

    def advance(self) -> None:
        """Advance the clock by one turn and reset the action budget."""
        self.current_turn += 1
        self.actions_allowed = self._allowed_for_current_turn()
        self.actions_used = 0

    def reset(self) -> None:
        self.current_turn = 0
        self.actions_used = 0
        self.actions_allowed = self._allowed_for_current_turn()

    def _allowed_for_current_turn(self) -> int:
        # One extra action in the final stretch
        if self.is_final_stretch:
            return self.base_actions + self.bonus_actions
        return self.base_actions
