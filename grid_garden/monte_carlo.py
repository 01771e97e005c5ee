"""Monte Carlo balance analysis: play N games with a random placement policy."""

from __future__ import annotations

import csv
import os
import statistics
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
from numpy.random import Generator

from grid_garden.core.config import GameConfig


@dataclass
class RunResult:
    """Summary of a single game."""
    seed: int
    final_score: int
    crops_planted: int
    crops_harvested: int
    efficiency_bonus: int
    final_utilization: float
    synergy_points: int
    best_turn_points: int
    avg_points_per_turn: int
    elapsed_seconds: float


def play_random_game(
    controller: "TurnController",  # noqa: F821
    policy_rng: Generator,
    end_turn_chance: float = 0.1,
    max_steps: int = 10_000,
) -> None:
    """Drive a controller to game over by planting at random valid spots.

    Each step either ends the turn early (with ``end_turn_chance``) or plants
    the active crop at a uniformly chosen valid origin. Turns end on their own
    once actions run out or nothing fits.
    """
    steps = 0
    while not controller.game_over and steps < max_steps:
        steps += 1
        positions = controller.valid_positions()
        if not positions or controller.clock.actions_exhausted() or policy_rng.random() < end_turn_chance:
            controller.end_turn()
            continue
        x, y = positions[int(policy_rng.integers(len(positions)))]
        controller.place_active(x, y)


def run_single(
    seed: int,
    config: Optional[GameConfig] = None,
    end_turn_chance: float = 0.1,
) -> RunResult:
    """Play one game and return its summary."""
    from grid_garden.simulation.engine import TurnController

    controller = TurnController(config=config, seed=seed)
    policy_rng = np.random.default_rng(seed + 1)

    t0 = time.time()
    play_random_game(controller, policy_rng, end_turn_chance)
    elapsed = time.time() - t0

    snaps = controller.metrics.snapshots
    last = snaps[-1] if snaps else None
    stats = controller.final_stats

    return RunResult(
        seed=seed,
        final_score=controller.score,
        crops_planted=controller.crops_planted,
        crops_harvested=controller.crops_harvested,
        efficiency_bonus=controller.efficiency_bonus_awarded,
        final_utilization=last.utilization if last else 0.0,
        synergy_points=sum(s.synergy_points for s in snaps),
        best_turn_points=max((s.points_scored for s in snaps), default=0),
        avg_points_per_turn=stats.avg_points_per_turn if stats else 0,
        elapsed_seconds=elapsed,
    )


def monte_carlo(
    n_runs: int = 50,
    config: Optional[GameConfig] = None,
    end_turn_chance: float = 0.1,
    output_dir: Optional[str] = "results/monte_carlo",
    verbose: bool = True,
) -> list[RunResult]:
    """Run N games with generated seeds and report aggregate stats."""

    results: list[RunResult] = []
    rng = np.random.default_rng(0)
    seeds = [int(s) for s in rng.integers(0, 100_000, size=n_runs)]
    config = config or GameConfig()

    if verbose:
        print(f"=== Monte Carlo Balance Run ===")
        print(f"Runs: {n_runs} | Board: {config.width}x{config.height} | Turns: {config.max_turns}")
        print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
        print()

    total_t0 = time.time()

    for i, seed in enumerate(seeds):
        result = run_single(seed, config, end_turn_chance)
        results.append(result)
        if verbose:
            print(
                f"  Run {i+1:>3}/{n_runs} | seed={seed:>5} | "
                f"score={result.final_score:>4} | "
                f"planted={result.crops_planted:>3} | "
                f"harvested={result.crops_harvested:>3} | "
                f"bonus={result.efficiency_bonus:>3} | "
                f"{result.elapsed_seconds:.2f}s"
            )

    if verbose:
        total_elapsed = time.time() - total_t0
        print(f"\nAll {n_runs} runs completed in {total_elapsed:.1f}s")
        print(aggregate_report(results))

    if output_dir:
        csv_path = export_results_csv(results, output_dir)
        if verbose:
            print(f"\nResults exported to {csv_path}")

    return results


def aggregate_report(results: list[RunResult]) -> str:
    """Mean / median / spread of the key outcomes across runs."""

    def stat_line(label: str, values: list[float], fmt: str = ".1f") -> str:
        if not values:
            return f"  {label}: no data"
        mn = min(values)
        mx = max(values)
        avg = statistics.mean(values)
        med = statistics.median(values)
        std = statistics.stdev(values) if len(values) > 1 else 0
        return f"  {label:<24s}  mean={avg:{fmt}}  median={med:{fmt}}  std={std:{fmt}}  min={mn:{fmt}}  max={mx:{fmt}}"

    lines = ["=" * 70, "AGGREGATE RESULTS", "=" * 70]
    lines.append(stat_line("Final score", [r.final_score for r in results]))
    lines.append(stat_line("Crops planted", [r.crops_planted for r in results]))
    lines.append(stat_line("Crops harvested", [r.crops_harvested for r in results]))
    lines.append(stat_line("Synergy points", [r.synergy_points for r in results]))
    lines.append(stat_line("Best turn", [r.best_turn_points for r in results]))
    lines.append(stat_line("Final utilization", [r.final_utilization for r in results], ".2f"))

    n = max(1, len(results))
    bonus_freq: dict[int, int] = {}
    for r in results:
        bonus_freq[r.efficiency_bonus] = bonus_freq.get(r.efficiency_bonus, 0) + 1
    lines.append("")
    lines.append("EFFICIENCY BONUS")
    for bonus, count in sorted(bonus_freq.items(), key=lambda x: -x[0]):
        lines.append(f"  +{bonus:<4} {count}/{len(results)} runs ({count / n * 100:.0f}%)")
    return "\n".join(lines)


def export_results_csv(results: list[RunResult], output_dir: str) -> str:
    os.makedirs(output_dir, exist_ok=True)
    csv_path = os.path.join(output_dir, "monte_carlo_results.csv")
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "seed", "final_score", "crops_planted", "crops_harvested",
            "efficiency_bonus", "final_utilization", "synergy_points",
            "best_turn_points", "avg_points_per_turn", "elapsed_s",
        ])
        for r in results:
            writer.writerow([
                r.seed, r.final_score, r.crops_planted, r.crops_harvested,
                r.efficiency_bonus, f"{r.final_utilization:.3f}",
                r.synergy_points, r.best_turn_points, r.avg_points_per_turn,
                f"{r.elapsed_seconds:.3f}",
            ])
    return csv_path


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Monte Carlo Grid Garden balance run")
    parser.add_argument("--runs", type=int, default=50, help="Number of games")
    parser.add_argument("--turns", type=int, default=None, help="Turns per game")
    parser.add_argument("--end-turn-chance", type=float, default=0.1, help="Chance to end a turn early")
    parser.add_argument("--exclude-harvested-synergy", action="store_true",
                        help="Do not count crops harvested earlier in the same batch as neighbours")
    parser.add_argument("--output-dir", type=str, default="results/monte_carlo")
    args = parser.parse_args()

    overrides = {"synergy_includes_harvested": not args.exclude_harvested_synergy}
    if args.turns is not None:
        overrides["max_turns"] = args.turns
    cfg = GameConfig(**overrides)

    monte_carlo(
        n_runs=args.runs,
        config=cfg,
        end_turn_chance=args.end_turn_chance,
        output_dir=args.output_dir,
    )
