"""One-way game events for rendering, audio, particle and storage collaborators."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional


class ForcedAdvanceReason(Enum):
    """Why a turn ended without the player asking for it."""

    NO_VALID_PLACEMENT = "No valid placements - advancing turn..."
    ACTIONS_EXHAUSTED = "All actions used - advancing turn..."


@dataclass
class GameOverStats:
    """End-of-game summary handed to the game-over screen."""

    crops_planted: int
    crops_harvested: int
    final_turn: int
    max_turns: int
    avg_points_per_turn: int
    high_score: int

    def to_dict(self) -> dict:
        return asdict(self)


class GameListener:
    """Base class for event sinks. Override only what you need."""

    def on_crop_placed(self, crop: "Crop") -> None:  # noqa: F821
        pass

    def on_forced_advance(self, reason: ForcedAdvanceReason) -> None:
        pass

    def on_turn_advanced(self, turn: int) -> None:
        pass

    def on_harvest(self, report: "HarvestReport") -> None:  # noqa: F821
        pass

    def on_score_changed(self, new_total: int, delta: int) -> None:
        pass

    def on_game_over(self, final_score: int, stats: GameOverStats) -> None:
        pass


class EventBus(GameListener):
    """Fans each event out to every subscribed listener.

    A listener that raises is reported to the logger and skipped; the core
    keeps running headless no matter what its collaborators do.
    """

    def __init__(
        self,
        listeners: Optional[list[GameListener]] = None,
        logger: Optional["GameLogger"] = None,  # noqa: F821
    ) -> None:
        self._listeners: list[GameListener] = list(listeners or [])
        self.logger = logger

    @property
    def listeners(self) -> list[GameListener]:
        return list(self._listeners)

    def subscribe(self, listener: GameListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: GameListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def on_crop_placed(self, crop) -> None:
        self._dispatch("on_crop_placed", crop)

    def on_forced_advance(self, reason) -> None:
        self._dispatch("on_forced_advance", reason)

    def on_turn_advanced(self, turn) -> None:
        self._dispatch("on_turn_advanced", turn)

    def on_harvest(self, report) -> None:
        self._dispatch("on_harvest", report)

    def on_score_changed(self, new_total, delta) -> None:
        self._dispatch("on_score_changed", new_total, delta)

    def on_game_over(self, final_score, stats) -> None:
        self._dispatch("on_game_over", final_score, stats)

    def _dispatch(self, method: str, *args) -> None:
        for listener in list(self._listeners):
            try:
                getattr(listener, method)(*args)
            except Exception as e:
                if self.logger:
                    self.logger.log(
                        "ERROR",
                        f"{type(listener).__name__}.{method} failed: {e}",
                        listener=type(listener).__name__,
                    )
