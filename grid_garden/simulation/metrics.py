"""Per-turn data collection, summary report and CSV export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class TurnSnapshot:
    """State of the game at the end of one turn."""

    turn: int = 0
    score: int = 0
    points_scored: int = 0
    crops_harvested: int = 0
    synergy_points: int = 0
    live_crops: int = 0
    ready: int = 0
    growing: int = 0
    utilization: float = 0.0
    actions_used: int = 0


class MetricsCollector:
    """Collects a snapshot every completed turn."""

    def __init__(self) -> None:
        self.snapshots: list[TurnSnapshot] = []
        self._turn_points: int = 0
        self._turn_harvested: int = 0
        self._turn_synergy: int = 0
        self._turn_placements: int = 0

    def record_placement(self) -> None:
        self._turn_placements += 1

    def record_harvest(self, report: "HarvestReport", points_awarded: int) -> None:  # noqa: F821
        self._turn_points += points_awarded
        self._turn_harvested += report.count
        self._turn_synergy += sum(d.synergy for d in report.details)

    def collect_turn(self, turn: int, score: int, board: "GridBoard") -> TurnSnapshot:  # noqa: F821
        """Snapshot the board after a turn has been fully processed."""
        stats = board.stats()
        snapshot = TurnSnapshot(
            turn=turn,
            score=score,
            points_scored=self._turn_points,
            crops_harvested=self._turn_harvested,
            synergy_points=self._turn_synergy,
            live_crops=len(board.live_crops()),
            ready=stats.ready,
            growing=stats.growing,
            utilization=board.utilization(),
            actions_used=self._turn_placements,
        )
        self.snapshots.append(snapshot)

        # Reset turn counters
        self._turn_points = 0
        self._turn_harvested = 0
        self._turn_synergy = 0
        self._turn_placements = 0

        return snapshot

    def reset(self) -> None:
        self.snapshots.clear()
        self._turn_points = 0
        self._turn_harvested = 0
        self._turn_synergy = 0
        self._turn_placements = 0

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "turn", "score", "points_scored", "crops_harvested",
                "synergy_points", "live_crops", "ready", "growing",
                "utilization", "actions_used",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.turn, s.score, s.points_scored, s.crops_harvested,
                    s.synergy_points, s.live_crops, s.ready, s.growing,
                    f"{s.utilization:.3f}", s.actions_used,
                ])

    def summary_report(self, start_turn: int = 0, end_turn: Optional[int] = None) -> str:
        """Generate a human-readable summary of the game so far."""
        relevant = [
            s for s in self.snapshots
            if s.turn >= start_turn and (end_turn is None or s.turn <= end_turn)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        total_points = sum(s.points_scored for s in relevant)
        total_harvested = sum(s.crops_harvested for s in relevant)
        total_synergy = sum(s.synergy_points for s in relevant)
        total_actions = sum(s.actions_used for s in relevant)
        best = max(relevant, key=lambda s: s.points_scored)

        lines = [
            f"=== Game Summary: Turn {first.turn} to Turn {last.turn} ===",
            f"Final score: {last.score}",
            f"",
            f"Planting:",
            f"  Crops placed: {total_actions}",
            f"  Crops harvested: {total_harvested}",
            f"  Synergy points (raw): {total_synergy}",
            f"",
            f"Scoring:",
            f"  Points from harvests: {total_points}",
            f"  Avg points/turn: {total_points / max(1, len(relevant)):.1f}",
            f"  Best turn: {best.turn} (+{best.points_scored})",
            f"",
            f"Board (final turn):",
            f"  Live crops: {last.live_crops} ({last.ready} ready, {last.growing} growing)",
            f"  Utilization: {last.utilization:.0%}",
        ]
        return "\n".join(lines)
