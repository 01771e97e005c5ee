"""matplotlib rendering of the garden and of the score over turns."""

from __future__ import annotations

import os
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.patches import Rectangle

from grid_garden.core.config import DASHBOARD_CELL_SIZE, DASHBOARD_UPDATE_INTERVAL
from grid_garden.simulation.events import GameListener
from grid_garden.world.crops import GrowthStage

_GROUND_COLOR = "#9ACD32"
_GRID_LINE_COLOR = "#8B4513"
_SYNERGY_GLOW = "#FFD700"
_STAGE_MARKS = {
    GrowthStage.PLANTED: ".",
    GrowthStage.GROWING: "o",
    GrowthStage.MATURE: "O",
    GrowthStage.HARVESTABLE: "*",
}


def draw_board(ax, board: "GridBoard", title: Optional[str] = None) -> None:  # noqa: F821
    """Draw grid lines, crops coloured by archetype, growth marks and synergy glow."""
    size = DASHBOARD_CELL_SIZE
    ax.clear()
    ax.set_facecolor(_GROUND_COLOR)
    ax.set_xlim(0, board.width * size)
    ax.set_ylim(board.height * size, 0)  # row 0 at the top like the canvas
    ax.set_aspect("equal")
    ax.set_xticks(np.arange(0, board.width * size + size, size))
    ax.set_yticks(np.arange(0, board.height * size + size, size))
    ax.tick_params(labelbottom=False, labelleft=False, length=0)
    ax.grid(True, color=_GRID_LINE_COLOR, linewidth=1)

    for crop in board.live_crops():
        arch = crop.archetype
        x, y = crop.x * size, crop.y * size
        w, h = arch.width * size, arch.height * size

        if board.synergy_for(crop) > 0:
            ax.add_patch(Rectangle((x, y), w, h, facecolor=_SYNERGY_GLOW, edgecolor="none"))
        ax.add_patch(
            Rectangle(
                (x + 0.05 * size, y + 0.05 * size), w - 0.1 * size, h - 0.1 * size,
                facecolor=arch.color,
                edgecolor="white" if crop.is_ready() else "black",
                linewidth=2 if crop.is_ready() else 0.5,
            )
        )
        stage = crop.growth_stage()
        mark = _STAGE_MARKS.get(stage, "") if stage else ""
        ax.text(
            x + w / 2, y + h / 2, f"{arch.symbol}{mark}",
            ha="center", va="center", fontsize=10, fontweight="bold",
        )

    if title:
        ax.set_title(title)


def render_board(board: "GridBoard", filepath: str, title: Optional[str] = None) -> None:  # noqa: F821
    """Save a single image of the board."""
    os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
    fig, ax = plt.subplots(figsize=(6, 6))
    draw_board(ax, board, title)
    fig.savefig(filepath, dpi=100, bbox_inches="tight")
    plt.close(fig)


class Dashboard(GameListener):
    """Live board + score plot, redrawn as turns advance."""

    def __init__(self, controller: "TurnController", interactive: bool = True) -> None:  # noqa: F821
        self.controller = controller
        self.interactive = interactive
        self._initialized = False
        self._fig = None
        self._axes = None
        self._update_counter = 0
        self._last_delta: int = 0

    def initialize(self) -> None:
        """Set up the matplotlib figure and subplots."""
        if self.interactive:
            plt.ion()
        self._fig, axes = plt.subplots(1, 2, figsize=(13, 6))
        self._fig.suptitle("Grid Garden", fontsize=14)
        self._axes = {"board": axes[0], "score": axes[1]}
        self._initialized = True
        self._redraw()

    def on_turn_advanced(self, turn: int) -> None:
        self._update_counter += 1
        if self._update_counter % DASHBOARD_UPDATE_INTERVAL != 0:
            return
        if not self._initialized:
            self.initialize()
        else:
            self._redraw()

    def on_crop_placed(self, crop) -> None:
        if self._initialized:
            self._redraw()

    def on_score_changed(self, new_total: int, delta: int) -> None:
        self._last_delta = delta

    def on_game_over(self, final_score, stats) -> None:
        if not self._initialized:
            self.initialize()
        self._fig.suptitle(f"Grid Garden: game over, final score {final_score}", fontsize=14)
        self._redraw()

    def _redraw(self) -> None:
        c = self.controller
        draw_board(
            self._axes["board"],
            c.board,
            f"Turn {c.current_turn}/{c.max_turns}  Score {c.score} (+{self._last_delta})",
        )

        ax = self._axes["score"]
        ax.clear()
        ax.set_title("Score by Turn")
        snapshots = c.metrics.snapshots
        if snapshots:
            turns = [s.turn for s in snapshots]
            ax.plot(turns, [s.score for s in snapshots], "g-", linewidth=2, label="Score")
            ax.bar(turns, [s.points_scored for s in snapshots], alpha=0.4, label="Points this turn")
            ax.legend(fontsize=8)
        ax.set_xlabel("Turn")
        ax.grid(True, alpha=0.3)

        if self.interactive:
            plt.pause(0.01)

    def save(self, filepath: str) -> None:
        """Save the current dashboard as an image."""
        if self._fig:
            self._fig.savefig(filepath, dpi=150, bbox_inches="tight")

    def close(self) -> None:
        """Close the dashboard."""
        if self._fig:
            plt.close(self._fig)
            self._fig = None
            self._initialized = False

    # ------------------------------------------------------------------
    # Post-hoc static plots
    # ------------------------------------------------------------------

    @staticmethod
    def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
        """Generate all plots, save them to output_dir and return their paths."""
        os.makedirs(output_dir, exist_ok=True)

        snapshots = metrics.snapshots
        if not snapshots:
            return []

        turns = [s.turn for s in snapshots]
        paths: list[str] = []

        # Score over time
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(turns, [s.score for s in snapshots])
        ax.set_title("Score Over Time")
        ax.set_xlabel("Turn")
        ax.set_ylabel("Score")
        ax.grid(True, alpha=0.3)
        paths.append(os.path.join(output_dir, "score.png"))
        fig.savefig(paths[-1], dpi=150)
        plt.close(fig)

        # Points per turn, split into base and synergy
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.bar(turns, [s.points_scored for s in snapshots], label="Points awarded")
        ax.bar(turns, [s.synergy_points for s in snapshots], label="Synergy (raw)", alpha=0.7)
        ax.set_title("Points per Turn")
        ax.set_xlabel("Turn")
        ax.set_ylabel("Points")
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)
        paths.append(os.path.join(output_dir, "points_per_turn.png"))
        fig.savefig(paths[-1], dpi=150)
        plt.close(fig)

        # Utilization
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(turns, [s.utilization for s in snapshots], "c-")
        ax.axhline(y=0.9, color="r", linestyle="--", alpha=0.5)
        ax.set_title("Garden Utilization")
        ax.set_xlabel("Turn")
        ax.set_ylabel("Fraction of cells planted")
        ax.set_ylim(0, 1)
        ax.grid(True, alpha=0.3)
        paths.append(os.path.join(output_dir, "utilization.png"))
        fig.savefig(paths[-1], dpi=150)
        plt.close(fig)

        return paths
