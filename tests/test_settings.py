import json

import pytest

from settings import GameSettings, ScoringRules, load_settings, save_settings


def test_defaults():
    settings = GameSettings()
    assert settings.server_url == "localhost:5000"
    assert settings.resolve_delay == 1.0
    assert settings.scoring == ScoringRules(100, 2, 10, 5, 10, 0)


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "missing.json") == GameSettings()


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(path) == GameSettings()

    path.write_text(json.dumps({"scoring": {"base_score": "lots"}}))
    assert load_settings(path) == GameSettings()


def test_save_and_load(tmp_path):
    path = tmp_path / "settings.json"
    settings = GameSettings(username="alice", max_level=8, resolve_delay=0.4,
                            scoring=ScoringRules(mismatch_penalty=2))
    save_settings(settings, path)
    assert load_settings(path) == settings


def test_partial_scoring_keeps_other_defaults():
    settings = GameSettings.from_dict({"scoring": {"min_score": 0}})
    assert settings.scoring.min_score == 0
    assert settings.scoring.base_score == 100


def test_invalid_values_rejected():
    with pytest.raises(ValueError):
        GameSettings.from_dict({"max_level": 0})
    with pytest.raises(ValueError):
        GameSettings.from_dict({"tick_interval": 0})
    with pytest.raises(ValueError):
        ScoringRules.from_dict({"penalty_per_move": True})
