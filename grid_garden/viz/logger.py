"""Structured game logging for narrative and debugging."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Optional, TextIO


@dataclass
class LogEntry:
    """A single log entry."""

    turn: int
    category: str
    message: str
    data: dict = field(default_factory=dict)


class GameLogger:
    """Structured logging with categories and verbosity control."""

    # Category constants
    PLACEMENT = "PLACEMENT"
    TURN = "TURN"
    HARVEST = "HARVEST"
    SCORE = "SCORE"
    GAME = "GAME"
    ERROR = "ERROR"

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        """
        verbosity levels:
            0 = only game lifecycle and collaborator errors
            1 = + turn and harvest summaries
            2 = + score changes
            3 = everything (every placement)
        """
        self.verbosity = verbosity
        self.current_turn: int = 0
        self._buffer: list[LogEntry] = []
        self._all_entries: list[LogEntry] = []
        self._file: Optional[TextIO] = None
        self._stdout = stdout

        if log_file:
            os.makedirs(os.path.dirname(log_file) if os.path.dirname(log_file) else ".", exist_ok=True)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        """Flushed entries followed by anything still buffered."""
        return self._all_entries + self._buffer

    def log(
        self,
        category: str,
        message: str,
        turn: Optional[int] = None,
        **data,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            turn=self.current_turn if turn is None else turn,
            category=category,
            message=message,
            data=data,
        )
        self._buffer.append(entry)

    def flush_turn(self, turn: int) -> None:
        """Write buffered logs for the turn and start buffering the next one."""
        _VERBOSITY_MAP = {
            self.GAME: 0,
            self.ERROR: 0,
            self.TURN: 1,
            self.HARVEST: 1,
            self.SCORE: 2,
            self.PLACEMENT: 3,
        }

        for entry in self._buffer:
            required_verbosity = _VERBOSITY_MAP.get(entry.category, 1)
            if required_verbosity <= self.verbosity:
                line = f"[Turn {entry.turn:>3}] [{entry.category:<9}] {entry.message}"
                if self._stdout:
                    print(line)
                if self._file:
                    self._file.write(line + "\n")

        self._all_entries.extend(self._buffer)
        self._buffer.clear()
        self.current_turn = turn

        if self._file:
            self._file.flush()

    def get_narrative(self, turn: int) -> str:
        """Generate a human-readable summary of a specific turn."""
        turn_entries = [e for e in self.entries if e.turn == turn]
        if not turn_entries:
            return f"Turn {turn}: Nothing notable happened."

        lines = [f"=== Turn {turn} ==="]
        for entry in turn_entries:
            lines.append(f"  [{entry.category}] {entry.message}")
        return "\n".join(lines)

    def export_json(self, filepath: str) -> None:
        """Export all log entries to JSON."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        data = [
            {
                "turn": e.turn,
                "category": e.category,
                "message": e.message,
                "data": e.data,
            }
            for e in self.entries
        ]
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def close(self) -> None:
        """Close the log file."""
        if self._file:
            self._file.close()
            self._file = None
