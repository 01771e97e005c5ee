import json

from grid_garden.core.config import HIGH_SCORE_KEY
from grid_garden.storage.highscore import HighScoreStore
from grid_garden.viz.logger import GameLogger


def test_missing_file_reads_as_zero(tmp_path):
    store = HighScoreStore(str(tmp_path / "none.json"))
    assert store.load() == 0


def test_save_only_when_beaten(tmp_path):
    path = tmp_path / "hs.json"
    store = HighScoreStore(str(path))
    assert store.save_if_higher(50)
    assert store.load() == 50
    assert json.loads(path.read_text()) == {HIGH_SCORE_KEY: 50}

    assert not store.save_if_higher(50)
    assert not store.save_if_higher(20)
    assert store.load() == 50
    assert store.save_if_higher(51)
    assert store.load() == 51


def test_zero_score_is_never_a_record(tmp_path):
    path = tmp_path / "hs.json"
    store = HighScoreStore(str(path))
    assert not store.save_if_higher(0)
    assert not path.exists()


def test_corrupt_file_reads_as_zero_and_is_logged(tmp_path):
    path = tmp_path / "hs.json"
    path.write_text("{not json")
    logger = GameLogger(verbosity=0, stdout=False)
    store = HighScoreStore(str(path), logger=logger)
    assert store.load() == 0
    assert [e.category for e in logger.entries] == ["ERROR"]


def test_unusable_values_read_as_zero(tmp_path):
    path = tmp_path / "hs.json"
    store = HighScoreStore(str(path))
    for payload in ([1, 2, 3], {HIGH_SCORE_KEY: -5}, {HIGH_SCORE_KEY: "12"}, {"other": 9}):
        path.write_text(json.dumps(payload))
        assert store.load() == 0


def test_custom_key(tmp_path):
    path = tmp_path / "hs.json"
    store = HighScoreStore(str(path), key="best")
    store.save_if_higher(7)
    assert json.loads(path.read_text()) == {"best": 7}
