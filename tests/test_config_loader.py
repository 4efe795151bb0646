"""Tests for YAML configuration loading."""

import pytest

from rtcmatch.config_loader import (
    DEFAULTS,
    ConfigError,
    load_and_validate_config,
    load_config,
    validate_config,
)


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestLoadConfig:
    def test_load(self, tmp_path):
        path = _write(tmp_path, "random_seed: 42\nbracket_size: 32\n")
        assert load_config(path) == {"random_seed": 42, "bracket_size": 32}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        with pytest.raises(ConfigError, match="Config file is empty"):
            load_config(_write(tmp_path, ""))

    def test_not_a_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(_write(tmp_path, "- 1\n- 2\n"))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(_write(tmp_path, "random_seed: [1, 2\n"))


class TestValidateConfig:
    def test_defaults(self):
        assert validate_config({}) == DEFAULTS

    def test_full_config(self):
        config = validate_config({
            "random_seed": 7,
            "bracket_size": 64,
            "event_name": "3rd Class Singles",
            "sport": "racquets",
            "max_entries_per_player": 3,
            "team_handicap_limit": 110.5,
            "previous_winners": ["Jane Smith"],
        })
        assert config["random_seed"] == 7
        assert config["bracket_size"] == 64
        assert config["sport"] == "racquets"
        assert config["team_handicap_limit"] == 110.5
        assert config["previous_winners"] == ["Jane Smith"]

    def test_null_previous_winners(self):
        assert validate_config({"previous_winners": None})["previous_winners"] == []

    @pytest.mark.parametrize(
        "config, message",
        [
            ({"random_seed": "abc"}, "random_seed"),
            ({"random_seed": True}, "random_seed"),
            ({"bracket_size": 12}, "bracket_size"),
            ({"event_name": 3}, "event_name"),
            ({"sport": "tennis"}, "sport"),
            ({"max_entries_per_player": 0}, "max_entries_per_player"),
            ({"team_handicap_limit": "high"}, "team_handicap_limit"),
            ({"previous_winners": "Jane"}, "previous_winners"),
        ],
    )
    def test_invalid_values(self, config, message):
        with pytest.raises(ConfigError, match=message):
            validate_config(config)

    def test_defaults_not_shared(self):
        config = validate_config({})
        config["previous_winners"].append("Jane")
        assert DEFAULTS["previous_winners"] == []


def test_load_and_validate(tmp_path):
    path = _write(tmp_path, "sport: squash\n")
    config = load_and_validate_config(path)
    assert config["sport"] == "squash"
    assert config["bracket_size"] == "auto"
