"""Entry point for Grid Garden: a terminal front end over the turn engine."""

from __future__ import annotations

import argparse
import os
import sys
import time

from grid_garden.simulation.events import GameListener
from grid_garden.viz.text_view import describe_archetype, render_board_text
from grid_garden.world.grid import InvalidPlacement

HELP_TEXT = """Commands:
  place X Y   plant the current crop with its top-left corner at column X, row Y
  end         end the turn (crops grow, ready crops are auto-harvested)
  harvest     harvest every ready crop now
  show        redraw the garden
  stats       print game statistics
  restart     start over
  quit        leave the game"""


class ConsoleListener(GameListener):
    """Prints game events as plain text lines."""

    def __init__(self, out=None) -> None:
        self.out = out or sys.stdout

    def _print(self, text: str) -> None:
        print(text, file=self.out)

    def on_crop_placed(self, crop) -> None:
        self._print(f"Planted {crop.archetype.name} at ({crop.x}, {crop.y})")

    def on_forced_advance(self, reason) -> None:
        self._print(reason.value)

    def on_turn_advanced(self, turn: int) -> None:
        self._print(f"--- Turn {turn} ---")

    def on_harvest(self, report) -> None:
        for d in report.details:
            line = f"  {d.crop} {d.position}: +{d.base_score}"
            if d.synergy > 0:
                line += f"  synergy +{d.synergy}"
            self._print(line)
        if report.has_synergy:
            self._print("  Synergy!")

    def on_score_changed(self, new_total: int, delta: int) -> None:
        self._print(f"Score: {new_total} (+{delta})")

    def on_game_over(self, final_score, stats) -> None:
        self._print("")
        self._print(f"=== Game Over! Final Score: {final_score} ===")
        self._print(f"  Crops Planted:   {stats.crops_planted}")
        self._print(f"  Crops Harvested: {stats.crops_harvested}")
        self._print(f"  Final Turn:      {stats.final_turn}/{stats.max_turns}")
        self._print(f"  Avg Points/Turn: {stats.avg_points_per_turn}")
        self._print(f"  High Score:      {stats.high_score}")


def status_text(controller) -> str:
    c = controller
    lines = [
        render_board_text(c.board),
        f"Turn {min(c.current_turn + 1, c.max_turns)}/{c.max_turns} | Score {c.score} | "
        f"{c.clock.actions_left} actions left | High score {c.high_score}",
    ]
    if c.active_archetype and not c.game_over:
        lines.append("Current: " + describe_archetype(c.active_archetype, c.preview_value(c.active_archetype)))
        lines.append("Next:    " + ", ".join(a.name for a in c.queue))
    return "\n".join(lines)


def run_command(controller, line: str, out=None) -> bool:
    """Execute one command line. Returns False when the player wants to quit."""
    out = out or sys.stdout
    parts = line.strip().lower().split()
    if not parts:
        return True
    cmd, args = parts[0], parts[1:]

    if cmd in ("quit", "q", "exit"):
        return False
    if cmd in ("help", "?"):
        print(HELP_TEXT, file=out)
    elif cmd in ("place", "p"):
        if len(args) != 2 or not all(a.lstrip("-").isdigit() for a in args):
            print("Usage: place X Y", file=out)
            return True
        if controller.game_over:
            print("The game is over. Type 'restart' to play again.", file=out)
            return True
        try:
            if controller.place_active(int(args[0]), int(args[1])) is None:
                print("No actions left this turn. Type 'end' to continue.", file=out)
        except InvalidPlacement as e:
            print(f"Can't plant there: {e}", file=out)
    elif cmd in ("end", "e"):
        controller.end_turn()
    elif cmd in ("harvest", "h"):
        if controller.manual_harvest().total == 0:
            print("Nothing is ready to harvest.", file=out)
    elif cmd in ("show", "s"):
        print(status_text(controller), file=out)
    elif cmd == "stats":
        for key, value in controller.game_stats().items():
            print(f"  {key}: {value}", file=out)
    elif cmd == "restart":
        controller.restart()
        print(status_text(controller), file=out)
    else:
        print(f"Unknown command '{cmd}'. Type 'help' for the list.", file=out)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Grid Garden - turn-based farming on a grid",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed (default: time based)")
    parser.add_argument("--turns", type=int, default=None, help="Number of turns (default: config)")
    parser.add_argument("--width", type=int, default=None, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=None, help="Grid height in cells")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--high-score-file", type=str, default=None, help="Where the high score is kept")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")
    parser.add_argument("--autoplay", action="store_true", help="Let a random policy play one game")
    parser.add_argument("--no-dashboard", action="store_true", help="Disable the matplotlib dashboard")

    args = parser.parse_args()

    # Import here to allow --help without loading everything
    import numpy as np

    from grid_garden.core.config import HIGH_SCORE_FILE, GameConfig
    from grid_garden.simulation.engine import TurnController
    from grid_garden.storage.highscore import HighScoreStore
    from grid_garden.viz.logger import GameLogger

    overrides = {}
    if args.turns is not None:
        overrides["max_turns"] = args.turns
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    config = GameConfig(**overrides)
    seed = args.seed if args.seed is not None else int(time.time())

    logger = GameLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "game.log"),
        stdout=(args.verbosity > 0),
    )
    store = HighScoreStore(args.high_score_file or os.path.join(args.output_dir, HIGH_SCORE_FILE))
    controller = TurnController(
        config=config,
        seed=seed,
        listeners=[ConsoleListener()],
        high_score_store=store,
        logger=logger,
    )

    print("=== Grid Garden ===")
    print(f"Garden: {config.width}x{config.height} | Turns: {config.max_turns} | Seed: {seed}")
    print()

    # Set up dashboard
    dashboard = None
    if not args.no_dashboard:
        try:
            from grid_garden.viz.dashboard import Dashboard
            dashboard = Dashboard(controller, interactive=not args.autoplay)
            controller.add_listener(dashboard)
            print("Live dashboard enabled")
        except Exception as e:
            print(f"Dashboard unavailable ({e}), continuing without visualization")
            dashboard = None

    try:
        if args.autoplay:
            from grid_garden.monte_carlo import play_random_game
            play_random_game(controller, np.random.default_rng(seed + 1))
        else:
            print(HELP_TEXT)
            print()
            print(status_text(controller))
            while True:
                try:
                    line = input("> ")
                except EOFError:
                    break
                if not run_command(controller, line):
                    break
                if line.strip():
                    print(status_text(controller))
    except KeyboardInterrupt:
        print("\nGame interrupted by user")

    # Export results
    os.makedirs(args.output_dir, exist_ok=True)
    csv_path = os.path.join(args.output_dir, "turns.csv")
    controller.metrics.export_csv(csv_path)
    print(f"\nTurn metrics exported to {csv_path}")
    print(controller.metrics.summary_report())

    try:
        from grid_garden.viz.dashboard import Dashboard as DashClass, render_board
        DashClass.comprehensive_report(controller.metrics, args.output_dir)
        render_board(controller.board, os.path.join(args.output_dir, "final_board.png"), "Final garden")
    except Exception as e:
        print(f"Could not generate plots: {e}")

    if dashboard:
        dashboard.save(os.path.join(args.output_dir, "dashboard_final.png"))
        dashboard.close()

    logger.flush_turn(controller.current_turn)
    logger.export_json(os.path.join(args.output_dir, "events.json"))
    logger.close()

    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()
