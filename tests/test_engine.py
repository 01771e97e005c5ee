import numpy as np
import pytest

from grid_garden.core.config import GameConfig
from grid_garden.simulation.engine import GameState, TurnController
from grid_garden.simulation.events import ForcedAdvanceReason, GameListener
from grid_garden.storage.highscore import HighScoreStore
from grid_garden.world.grid import InvalidPlacement

from conftest import OAK, RADISH, SPROUT, single_crop_config


def end_turns(controller, n):
    for _ in range(n):
        controller.end_turn()


def test_initial_state():
    c = TurnController(single_crop_config(SPROUT))
    assert c.state is GameState.ACTIVE
    assert c.current_turn == 0
    assert c.score == 0
    assert c.actions_used == 0
    assert c.actions_allowed == 3
    assert c.active_archetype.name == "Sprout"
    assert len(c.queue) == 3


def test_place_active_advances_queue():
    c = TurnController(seed=3)
    upcoming = list(c.queue)
    crop = c.place_active(0, 0)
    assert crop is not None
    assert crop.planted_turn == 0
    assert c.active_archetype is upcoming[0]
    assert list(c.queue)[:2] == upcoming[1:]
    assert len(c.queue) == 3
    assert c.actions_used == 1
    assert c.crops_planted == 1


def test_invalid_placement_leaves_state_alone():
    c = TurnController(single_crop_config(SPROUT))
    c.place_active(0, 0)
    with pytest.raises(InvalidPlacement):
        c.place_active(0, 0)
    with pytest.raises(InvalidPlacement):
        c.place_active(8, 0)
    assert c.actions_used == 1
    assert c.crops_planted == 1
    assert len(c.board.crops) == 1


def test_spending_all_actions_ends_the_turn(listener):
    c = TurnController(single_crop_config(SPROUT), listeners=[listener])
    for x in range(3):
        c.place_active(x, 0)
    assert c.current_turn == 1
    assert c.actions_used == 0
    assert listener.of("forced") == [("forced", ForcedAdvanceReason.ACTIONS_EXHAUSTED)]


def test_full_board_ends_the_turn(listener):
    config = single_crop_config(OAK, width=2, height=2, base_actions_per_turn=10)
    c = TurnController(config, listeners=[listener])
    for x, y in [(0, 0), (1, 0), (0, 1)]:
        c.place_active(x, y)
    assert c.current_turn == 0
    c.place_active(1, 1)
    assert c.current_turn == 1
    assert listener.of("forced") == [("forced", ForcedAdvanceReason.NO_VALID_PLACEMENT)]


def test_deferred_auto_end_waits_for_delay():
    config = single_crop_config(SPROUT, auto_end_turn_delay_ms=500, base_actions_per_turn=1)
    c = TurnController(config)
    c.place_active(0, 0)
    assert c.auto_end_pending
    assert c.current_turn == 0
    # Budget spent: further placements are ignored while the end is pending
    assert c.place_active(1, 0) is None
    assert not c.tick(200)
    assert c.current_turn == 0
    assert c.tick(300)
    assert c.current_turn == 1
    assert not c.auto_end_pending


def test_manual_end_turn_cancels_pending_auto_end():
    """Manual and automatic end turn firing together advance only once."""
    config = single_crop_config(SPROUT, auto_end_turn_delay_ms=500, base_actions_per_turn=1)
    c = TurnController(config)
    c.place_active(0, 0)
    c.end_turn()
    assert c.current_turn == 1
    assert not c.tick(1000)
    assert c.current_turn == 1


def test_extra_action_in_final_stretch():
    c = TurnController(single_crop_config(SPROUT, max_turns=20))
    end_turns(c, 14)
    assert c.actions_allowed == 3
    c.end_turn()
    assert c.current_turn == 15
    assert c.actions_allowed == 4


def test_short_game_starts_in_final_stretch():
    c = TurnController(single_crop_config(SPROUT, max_turns=4))
    assert c.actions_allowed == 4


def test_end_turn_grows_and_auto_harvests():
    c = TurnController(single_crop_config(SPROUT))
    c.place_active(0, 0)
    c.end_turn()
    assert c.board.crop_at(0, 0).age == 1
    assert c.score == 0
    report = c.end_turn()
    assert report.total == 11
    assert c.score == 11
    assert c.crops_harvested == 1
    assert c.board.crops == []
    assert c.last_harvest_details[0].base_score == 11


def test_final_turn_multiplier_on_end_turn():
    """Closing turn 19 of 20 scales a raw 10 points to floor(10 * 1.8)."""
    c = TurnController(single_crop_config(RADISH, max_turns=20, base_actions_per_turn=3))
    end_turns(c, 19)
    assert c.current_turn == 19
    c.place_active(0, 0)
    report = c.end_turn()
    assert report.total == 10
    assert c.score == 18
    assert c.game_over


@pytest.mark.parametrize(
    "remaining, expected",
    [(20, 10), (4, 10), (3, 12), (2, 15), (1, 18), (0, 20)],
)
def test_add_score_multiplier_table(remaining, expected):
    c = TurnController(single_crop_config(SPROUT))
    assert c.add_score(10, turns_remaining=remaining) == expected
    assert c.score == expected


def test_add_score_uses_current_turns_remaining():
    c = TurnController(single_crop_config(SPROUT))
    assert c.add_score(10) == 10


def test_manual_harvest_keeps_turn():
    c = TurnController(single_crop_config(RADISH))
    c.place_active(0, 0)
    report = c.manual_harvest()
    assert report.total == 10
    assert c.score == 10
    assert c.current_turn == 0
    assert c.board.crops == []
    assert c.manual_harvest().total == 0


def test_nothing_changes_after_game_over():
    c = TurnController(single_crop_config(SPROUT, max_turns=2))
    end_turns(c, 2)
    assert c.game_over
    assert c.state is GameState.ENDED

    report = c.end_turn()
    assert report.total == 0 and report.details == []
    assert c.current_turn == 2
    assert c.place_active(0, 0) is None
    assert c.manual_harvest().total == 0
    assert c.add_score(10) == 0
    assert c.score == 0


def test_ninety_percent_coverage_awards_top_bonus_once(listener):
    c = TurnController(single_crop_config(OAK, max_turns=1), listeners=[listener])
    for i in range(58):
        c.board.place(OAK, i % 8, i // 8)
    assert c.board.utilization() >= 0.9
    c.end_turn()
    assert c.game_over
    assert c.efficiency_bonus_awarded == 100
    assert c.score == 100
    c.end_turn()
    assert c.score == 100
    assert listener.of("score") == [("score", 100, 100)]


def test_exactly_ninety_percent_on_ten_by_ten():
    c = TurnController(single_crop_config(OAK, max_turns=1, width=10, height=10))
    for i in range(90):
        c.board.place(OAK, i % 10, i // 10)
    c.end_turn()
    assert c.score == 100


@pytest.mark.parametrize("cells, bonus", [(48, 60), (39, 30), (29, 10), (28, 0)])
def test_efficiency_tiers(cells, bonus):
    c = TurnController(single_crop_config(OAK, max_turns=1))
    for i in range(cells):
        c.board.place(OAK, i % 8, i // 8)
    c.end_turn()
    assert c.efficiency_bonus_awarded == bonus
    assert c.score == bonus


def test_game_over_stats_and_high_score(tmp_path, listener):
    store = HighScoreStore(str(tmp_path / "hs.json"))
    c = TurnController(
        single_crop_config(RADISH, max_turns=2), listeners=[listener], high_score_store=store,
    )
    c.place_active(0, 0)
    end_turns(c, 2)

    # Two turns remaining when the radish was scored: 10 * 1.5
    assert c.score == 15
    [(_, final_score, stats)] = listener.of("game_over")
    assert final_score == 15
    assert stats.crops_planted == 1
    assert stats.crops_harvested == 1
    assert stats.final_turn == 2
    assert stats.max_turns == 2
    assert stats.avg_points_per_turn == 8
    assert stats.high_score == 15
    assert store.load() == 15


def test_lower_score_keeps_stored_high_score(tmp_path):
    store = HighScoreStore(str(tmp_path / "hs.json"))
    store.save_if_higher(1000)
    c = TurnController(single_crop_config(SPROUT, max_turns=1), high_score_store=store)
    c.end_turn()
    assert c.final_stats.high_score == 1000
    assert store.load() == 1000
    assert c.high_score == 1000


def test_broken_listener_does_not_break_the_game(listener):
    class Broken(GameListener):
        def on_crop_placed(self, crop):
            raise RuntimeError("no audio device")

    c = TurnController(single_crop_config(SPROUT), listeners=[Broken(), listener])
    crop = c.place_active(0, 0)
    assert crop is not None
    assert c.actions_used == 1
    assert listener.of("placed") == [("placed", crop)]
    errors = [e for e in c.logger.entries if e.category == "ERROR"]
    assert len(errors) == 1
    assert "no audio device" in errors[0].message


def test_event_order_for_a_harvest_turn(listener):
    c = TurnController(single_crop_config(SPROUT, max_turns=3), listeners=[listener])
    c.place_active(0, 0)
    end_turns(c, 2)
    kinds = [e[0] for e in listener.events]
    assert kinds == ["placed", "turn", "score", "harvest", "turn"]
    assert listener.of("turn") == [("turn", 1), ("turn", 2)]


def test_game_over_follows_final_turn_event(listener):
    c = TurnController(single_crop_config(SPROUT, max_turns=1), listeners=[listener])
    c.end_turn()
    assert [e[0] for e in listener.events] == ["turn", "game_over"]


def test_restart_resets_match():
    c = TurnController(single_crop_config(RADISH, max_turns=2))
    c.place_active(0, 0)
    end_turns(c, 2)
    assert c.game_over
    c.restart()
    assert c.state is GameState.ACTIVE
    assert c.current_turn == 0
    assert c.score == 0
    assert c.crops_planted == 0
    assert c.board.crops == []
    assert c.metrics.snapshots == []
    assert len(c.queue) == 3


def test_seed_and_injected_rng_agree():
    a = TurnController(seed=11)
    b = TurnController(rng=np.random.default_rng(11))
    names = lambda c: [c.active_archetype.name] + [q.name for q in c.queue]
    assert names(a) == names(b)


def test_metrics_snapshot_per_turn():
    c = TurnController(single_crop_config(SPROUT))
    c.place_active(0, 0)
    end_turns(c, 2)
    snaps = c.metrics.snapshots
    assert [s.turn for s in snaps] == [1, 2]
    assert snaps[0].actions_used == 1
    assert snaps[1].points_scored == 11
    assert snaps[1].crops_harvested == 1
    assert snaps[1].score == 11


def test_game_stats_and_preview_value():
    c = TurnController(config=GameConfig(), seed=5)
    stats = c.game_stats()
    assert stats["turn"] == 0
    assert stats["max_turns"] == 20
    assert stats["actions_left"] == 3
    assert stats["grid_stats"] == {"total": 0, "ready": 0, "growing": 0}
    assert len(stats["next_crops"]) == 3
    assert c.preview_value(c.catalog.get("Pumpkin")) == 56


def test_turns_are_logged():
    c = TurnController(single_crop_config(SPROUT))
    c.end_turn()
    assert any(e.category == "TURN" for e in c.logger.entries)
