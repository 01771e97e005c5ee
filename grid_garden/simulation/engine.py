"""Turn controller: placement budget, crop queue, growth, harvest and scoring."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import asdict
from enum import Enum
from typing import Optional

import numpy as np
from numpy.random import Generator

from grid_garden.core.clock import TurnClock
from grid_garden.core.config import GameConfig
from grid_garden.simulation.events import (
    EventBus,
    ForcedAdvanceReason,
    GameListener,
    GameOverStats,
)
from grid_garden.simulation.metrics import MetricsCollector
from grid_garden.simulation.scoring import apply_endgame_multiplier, efficiency_bonus
from grid_garden.storage.highscore import HighScoreStore
from grid_garden.viz.logger import GameLogger
from grid_garden.world.catalog import CropCatalog
from grid_garden.world.crops import Crop, CropArchetype
from grid_garden.world.grid import GridBoard, HarvestDetail, HarvestReport


class GameState(Enum):
    ACTIVE = "active"
    ENDED = "ended"


class TurnController:
    """Orchestrates one match: Active until max_turns is reached, then Ended."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: int = 42,
        rng: Optional[Generator] = None,
        catalog: Optional[CropCatalog] = None,
        listeners: Optional[list[GameListener]] = None,
        high_score_store: Optional[HighScoreStore] = None,
        logger: Optional[GameLogger] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng: Generator = rng if rng is not None else np.random.default_rng(seed)
        self.events = EventBus(listeners)
        self.catalog = catalog or CropCatalog.from_config(self.config)
        self.board = GridBoard(
            self.catalog,
            width=self.config.width,
            height=self.config.height,
            events=self.events,
            age_bonus_factor=self.config.age_bonus_factor,
            early_harvest_penalty=self.config.early_harvest_penalty,
            synergy_includes_harvested=self.config.synergy_includes_harvested,
        )
        self.clock = TurnClock(
            max_turns=self.config.max_turns,
            base_actions=self.config.base_actions_per_turn,
            bonus_window=self.config.bonus_action_window,
            bonus_actions=self.config.bonus_actions,
        )
        self.metrics = MetricsCollector()
        self.high_score_store = high_score_store
        self.logger = logger or GameLogger(verbosity=0, stdout=False)

        self.state = GameState.ACTIVE
        self.score: int = 0
        self.active_archetype: Optional[CropArchetype] = None
        self.queue: deque[CropArchetype] = deque()
        self.crops_planted: int = 0
        self.crops_harvested: int = 0
        self.last_harvest_details: list[HarvestDetail] = []
        self.efficiency_bonus_awarded: int = 0
        self.final_stats: Optional[GameOverStats] = None

        # Deferred automatic end turn: the turn it was scheduled in, and time waited
        self._pending_auto_end: Optional[int] = None
        self._pending_elapsed_ms: float = 0.0

        self._generate_initial_crops()
        self.logger.log(
            GameLogger.GAME,
            f"New {self.board.width}x{self.board.height} garden, {self.clock.max_turns} turns",
        )

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def logger(self) -> GameLogger:
        return self._logger

    @logger.setter
    def logger(self, logger: GameLogger) -> None:
        self._logger = logger
        self.events.logger = logger
        if self.high_score_store is not None and self.high_score_store.logger is None:
            self.high_score_store.logger = logger

    def add_listener(self, listener: GameListener) -> None:
        self.events.subscribe(listener)

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def game_over(self) -> bool:
        return self.state is GameState.ENDED

    @property
    def current_turn(self) -> int:
        return self.clock.current_turn

    @property
    def max_turns(self) -> int:
        return self.clock.max_turns

    @property
    def actions_used(self) -> int:
        return self.clock.actions_used

    @property
    def actions_allowed(self) -> int:
        return self.clock.actions_allowed

    @property
    def auto_end_pending(self) -> bool:
        return self._pending_auto_end is not None

    @property
    def high_score(self) -> int:
        return self.high_score_store.load() if self.high_score_store else 0

    def can_place_active_anywhere(self) -> bool:
        if self.active_archetype is None:
            return False
        return self.board.can_place_anywhere(self.active_archetype)

    def valid_positions(self) -> list[tuple[int, int]]:
        if self.active_archetype is None:
            return []
        return self.board.valid_positions(self.active_archetype)

    def preview_value(self, archetype: CropArchetype) -> int:
        """Points a fully grown crop of this kind is worth before synergy."""
        return archetype.base_value + math.floor(
            archetype.growth_duration * self.config.age_bonus_factor
        )

    def game_stats(self) -> dict:
        return {
            "turn": self.clock.current_turn,
            "max_turns": self.clock.max_turns,
            "score": self.score,
            "game_over": self.game_over,
            "current_crop": self.active_archetype.name if self.active_archetype else None,
            "next_crops": [a.name for a in self.queue],
            "actions_left": self.clock.actions_left,
            "grid_stats": asdict(self.board.stats()),
            "high_score": self.high_score,
        }

    # ------------------------------------------------------------------
    # Crop queue
    # ------------------------------------------------------------------

    def _generate_initial_crops(self) -> None:
        self.active_archetype = self.catalog.weighted_random_archetype(self.rng)
        self.queue = deque(
            self.catalog.weighted_random_archetype(self.rng)
            for _ in range(self.config.queue_length)
        )

    def _advance_crop_queue(self) -> None:
        if self.queue:
            self.active_archetype = self.queue.popleft()
            self.queue.append(self.catalog.weighted_random_archetype(self.rng))

    # ------------------------------------------------------------------
    # Player actions
    # ------------------------------------------------------------------

    def place_active(self, x: int, y: int) -> Optional[Crop]:
        """Plant the active crop with its top-left corner at (x, y).

        Raises InvalidPlacement when the footprint does not fit. Returns None
        without touching anything once the game is over or the turn's actions
        are spent.
        """
        if self.game_over or self.active_archetype is None:
            return None
        if self.clock.actions_exhausted():
            return None

        crop = self.board.place(self.active_archetype, x, y, self.clock.current_turn)
        self.clock.use_action()
        self.crops_planted += 1
        self.metrics.record_placement()
        self.logger.log(
            GameLogger.PLACEMENT,
            f"Planted {crop.archetype.name} at ({x}, {y}) "
            f"({self.clock.actions_used}/{self.clock.actions_allowed} this turn)",
            crop=crop.archetype.name,
            position=[x, y],
        )

        self._advance_crop_queue()
        self._check_turn_advancement()
        return crop

    def _check_turn_advancement(self) -> None:
        if not self.can_place_active_anywhere():
            reason = ForcedAdvanceReason.NO_VALID_PLACEMENT
        elif self.clock.actions_exhausted():
            reason = ForcedAdvanceReason.ACTIONS_EXHAUSTED
        else:
            return
        self.events.on_forced_advance(reason)
        self._schedule_auto_end()

    def _schedule_auto_end(self) -> None:
        if self.config.auto_end_turn_delay_ms <= 0:
            self.end_turn()
            return
        self._pending_auto_end = self.clock.current_turn
        self._pending_elapsed_ms = 0.0

    def tick(self, elapsed_ms: float) -> bool:
        """Advance the cooperative timer. Returns True if a deferred end turn ran."""
        if self._pending_auto_end is None:
            return False
        self._pending_elapsed_ms += elapsed_ms
        if self._pending_elapsed_ms < self.config.auto_end_turn_delay_ms:
            return False

        scheduled_turn = self._pending_auto_end
        self._pending_auto_end = None
        # The player may have ended this turn by hand while we waited
        if self.game_over or scheduled_turn != self.clock.current_turn:
            return False
        self.end_turn()
        return True

    def end_turn(self) -> HarvestReport:
        """Grow everything, auto-harvest, score, and move to the next turn."""
        if self.game_over:
            return HarvestReport()

        self._pending_auto_end = None
        scored_turn = self.clock.current_turn
        self.logger.log(
            GameLogger.TURN,
            f"Turn {scored_turn + 1} ending ({self.clock.actions_used} crops placed)",
        )

        self.clock.advance()
        self.board.advance_all_growth()

        report = self._harvest_and_score(turns_remaining=self.clock.max_turns - scored_turn)
        if report.total > 0:
            self.logger.log(GameLogger.HARVEST, f"Auto-harvested for {report.total} points")

        finished = self.clock.is_finished
        if finished:
            self._end_game()

        self.metrics.collect_turn(self.clock.current_turn, self.score, self.board)
        self.events.on_turn_advanced(self.clock.current_turn)
        if finished:
            self.events.on_game_over(self.score, self.final_stats)
        self.logger.flush_turn(self.clock.current_turn)
        return report

    def manual_harvest(self) -> HarvestReport:
        """Harvest ready crops now without ending the turn."""
        if self.game_over:
            return HarvestReport()
        report = self._harvest_and_score()
        if report.total > 0:
            self.logger.log(GameLogger.HARVEST, f"Manual harvest: {report.total} points")
        return report

    def _harvest_and_score(self, turns_remaining: Optional[int] = None) -> HarvestReport:
        report = self.board.harvest_ready()
        awarded = 0
        if report.total > 0:
            self.last_harvest_details = list(report.details)
            self.crops_harvested += report.count
            awarded = self.add_score(report.total, turns_remaining)
            self.events.on_harvest(report)
        self.metrics.record_harvest(report, awarded)
        self.board.sweep_harvested()
        return report

    def add_score(self, points: int, turns_remaining: Optional[int] = None) -> int:
        """Add points, scaled up in the final turns. Returns what was actually added."""
        if self.game_over or points <= 0:
            return 0
        if turns_remaining is None:
            turns_remaining = self.clock.turns_remaining
        final_points = apply_endgame_multiplier(
            points, turns_remaining, self.config.endgame_multipliers
        )
        if final_points > points:
            self.logger.log(
                GameLogger.SCORE,
                f"Final turns bonus: {points} -> {final_points}",
                raw=points,
                awarded=final_points,
            )
        self.score += final_points
        self.events.on_score_changed(self.score, final_points)
        return final_points

    # ------------------------------------------------------------------
    # Game over / restart
    # ------------------------------------------------------------------

    def _end_game(self) -> None:
        self.state = GameState.ENDED
        self._pending_auto_end = None

        bonus = efficiency_bonus(self.board.utilization(), self.config.efficiency_tiers)
        self.efficiency_bonus_awarded = bonus
        if bonus > 0:
            self.score += bonus
            self.logger.log(
                GameLogger.GAME,
                f"Efficiency bonus: +{bonus} points ({self.board.utilization():.0%} of the garden planted)",
            )
            self.events.on_score_changed(self.score, bonus)

        previous_high = 0
        if self.high_score_store is not None:
            previous_high = self.high_score_store.load()
            if self.high_score_store.save_if_higher(self.score):
                self.logger.log(GameLogger.GAME, f"New high score: {self.score}")

        turns_played = max(self.clock.current_turn, 1)
        self.final_stats = GameOverStats(
            crops_planted=self.crops_planted,
            crops_harvested=self.crops_harvested,
            final_turn=self.clock.current_turn,
            max_turns=self.clock.max_turns,
            avg_points_per_turn=math.floor(self.score / turns_played + 0.5),
            high_score=max(self.score, previous_high),
        )
        self.logger.log(GameLogger.GAME, f"Game over! Final score: {self.score}")

    def restart(self) -> None:
        """Start a fresh match with the same config and collaborators."""
        self.board.clear()
        self.clock.reset()
        self.metrics.reset()
        self.state = GameState.ACTIVE
        self.score = 0
        self.crops_planted = 0
        self.crops_harvested = 0
        self.last_harvest_details = []
        self.efficiency_bonus_awarded = 0
        self.final_stats = None
        self._pending_auto_end = None
        self._pending_elapsed_ms = 0.0
        self._generate_initial_crops()
        self.logger.log(GameLogger.GAME, "Game restarted")
        self.logger.flush_turn(0)
