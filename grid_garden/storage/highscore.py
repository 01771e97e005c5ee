"""Persisted high score: a single named non-negative integer in a JSON file."""

from __future__ import annotations

import json
import os
from typing import Optional

from grid_garden.core.config import HIGH_SCORE_FILE, HIGH_SCORE_KEY


class HighScoreStore:
    """Reads at startup, writes only when beaten."""

    def __init__(
        self,
        path: str = HIGH_SCORE_FILE,
        key: str = HIGH_SCORE_KEY,
        logger: Optional["GameLogger"] = None,  # noqa: F821
    ) -> None:
        self.path = path
        self.key = key
        self.logger = logger

    def load(self) -> int:
        """Stored high score, or 0 when missing or unreadable."""
        if not os.path.exists(self.path):
            return 0
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self._warn(f"Could not read high score from {self.path}: {e}")
            return 0
        value = data.get(self.key, 0) if isinstance(data, dict) else 0
        if not isinstance(value, int) or value < 0:
            return 0
        return value

    def save_if_higher(self, score: int) -> bool:
        """Persist ``score`` if it beats the stored value. Returns True on a new record."""
        if score <= self.load():
            return False
        try:
            os.makedirs(os.path.dirname(self.path) if os.path.dirname(self.path) else ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump({self.key: int(score)}, f, indent=2)
        except OSError as e:
            self._warn(f"Could not save high score to {self.path}: {e}")
            return False
        return True

    def _warn(self, message: str) -> None:
        if self.logger:
            self.logger.log("ERROR", message)
