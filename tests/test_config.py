"""Tests for the configuration module."""

import warnings
from pathlib import Path

import pytest

from app.config import (
    DEFAULT_STOP_WORDS,
    AppConfig,
    ConfigurationError,
    MatchingConfig,
    ScoreWeights,
    load_config,
    parse_config,
    validate_config_file,
)
from app.config.duration import (
    DurationParseError,
    parse_duration,
    parse_timedelta,
    seconds_to_human_readable,
    validate_duration_range,
)
from app.config.environment import DEFAULT_DATABASE_URL, load_environment_config
from app.config.validators import check_for_warnings

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config.example.yaml"


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestConfigurationLoading:
    def test_example_config_matches_defaults(self, mock_env_vars):
        app_config, env_config = load_config(EXAMPLE_CONFIG)

        assert app_config.matching == MatchingConfig()
        assert app_config.items.ttl_seconds == 3 * 86400
        assert app_config.sweep_interval_seconds == 300
        assert app_config.logging.format == "key-value"
        assert env_config.database_url == DEFAULT_DATABASE_URL

    def test_defaults_without_any_file(self, mock_env_vars, tmp_path):
        mock_env_vars.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config.matching.threshold == 50
        assert app_config.matching.max_matches == 3
        assert app_config.matching.max_keywords == 20
        assert app_config.matching.weights == ScoreWeights(category=40, location=30, keywords=30)

    def test_config_found_in_config_directory(self, mock_env_vars, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text("matching:\n  threshold: 60\n")
        mock_env_vars.chdir(tmp_path)

        app_config, _ = load_config()

        assert app_config.matching.threshold == 60

    def test_empty_file_means_defaults(self, mock_env_vars, tmp_path):
        app_config, _ = load_config(write_config(tmp_path, ""))
        assert app_config == AppConfig()

    def test_iso8601_durations(self, mock_env_vars, tmp_path):
        path = write_config(tmp_path, "items:\n  ttl: P7D\nsweep_interval: PT15M\n")

        app_config, _ = load_config(path)

        assert app_config.items.ttl_seconds == 7 * 86400
        assert app_config.sweep_interval_seconds == 900

    def test_explicit_path_must_exist(self, mock_env_vars, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(tmp_path / "missing.yaml")

        assert "not found" in str(exc_info.value).lower()

    def test_invalid_yaml_syntax(self, mock_env_vars, tmp_path):
        path = write_config(tmp_path, "matching:\n  threshold: [50\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)

        assert "parse" in str(exc_info.value).lower()

    def test_root_must_be_mapping(self, mock_env_vars, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(write_config(tmp_path, "- just\n- a list\n"))


class TestConfigurationValidation:
    @pytest.mark.parametrize(
        "config_dict",
        [
            {"matching": {"threshold": 101}},
            {"matching": {"max_matches": 0}},
            {"matching": {"weights": {"category": -1}}},
            {"matching": {"location_partial_factor": 0.4, "location_token_factor": 0.5}},
            {"items": {"ttl": "10m"}},
            {"items": {"ttl": "abc"}},
            {"sweep_interval": "30s"},
            {"sweep_interval": "2d"},
            {"logging": {"level": "LOUD"}},
            {"logging": {"format": "xml"}},
        ],
    )
    def test_invalid_values_rejected(self, config_dict):
        with pytest.raises(ConfigurationError):
            parse_config(config_dict)

    def test_error_message_is_numbered_with_suggestions(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_config({"matching": {"threshold": "high"}})

        message = str(exc_info.value)
        assert "1. " in message
        assert "matching -> threshold" in message
        assert "Suggestions:" in message
        assert exc_info.value.errors

    def test_stop_words_include_extras(self):
        config = MatchingConfig(extra_stop_words=["  Campus ", ""])

        assert config.extra_stop_words == ["campus"]
        assert "campus" in config.stop_words
        assert DEFAULT_STOP_WORDS <= config.stop_words

    def test_default_stop_words_are_shared(self):
        assert MatchingConfig().stop_words is DEFAULT_STOP_WORDS

    def test_matching_config_is_frozen(self):
        config = MatchingConfig()
        with pytest.raises(Exception):
            config.threshold = 10

    def test_max_attainable_score(self):
        assert MatchingConfig().max_attainable_score == 100
        low = MatchingConfig(weights=ScoreWeights(category=10, location=10, keywords=10))
        assert low.max_attainable_score == pytest.approx(33.0)


class TestWarnings:
    def test_defaults_produce_no_warnings(self):
        assert check_for_warnings(AppConfig()) == []

    def test_unreachable_threshold_warns(self):
        config = AppConfig(
            matching={"threshold": 90, "weights": {"category": 20, "location": 20, "keywords": 20}}
        )
        messages = check_for_warnings(config)
        assert any("no item will ever be matched" in m for m in messages)

    def test_zero_weight_and_zero_threshold_warn(self):
        config = AppConfig(matching={"threshold": 0, "weights": {"location": 0}})
        messages = check_for_warnings(config)

        assert any("'location'" in m for m in messages)
        assert any("threshold is 0" in m for m in messages)

    def test_redundant_stop_words_warn(self):
        messages = check_for_warnings(AppConfig(matching={"extra_stop_words": ["the", "campus"]}))
        assert any("the" in m and "campus" not in m for m in messages)

    def test_sweep_slower_than_ttl_warns(self):
        messages = check_for_warnings(AppConfig(items={"ttl": "2h"}, sweep_interval="3h"))
        assert any("sweep_interval" in m for m in messages)

    def test_parse_config_emits_user_warnings(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            parse_config({"matching": {"threshold": 0}})

        assert any(issubclass(w.category, UserWarning) for w in caught)


class TestEnvironment:
    def test_defaults(self, mock_env_vars):
        env_config = load_environment_config()

        assert env_config.database_url == DEFAULT_DATABASE_URL
        assert env_config.log_level is None
        assert env_config.environment == "local"
        assert env_config.trigger_workers == 4

    def test_values_are_read(self, mock_env_vars):
        mock_env_vars.setenv("DATABASE_URL", "sqlite:////tmp/x.db")
        mock_env_vars.setenv("LOG_LEVEL", "debug")
        mock_env_vars.setenv("ENVIRONMENT", "staging")
        mock_env_vars.setenv("TRIGGER_WORKERS", "8")

        env_config = load_environment_config()

        assert env_config.database_url == "sqlite:////tmp/x.db"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "staging"
        assert env_config.trigger_workers == 8

    @pytest.mark.parametrize(
        "name,value",
        [
            ("DATABASE_URL", "just-a-path.db"),
            ("LOG_LEVEL", "LOUD"),
            ("TRIGGER_WORKERS", "0"),
            ("TRIGGER_WORKERS", "many"),
        ],
    )
    def test_invalid_values_rejected(self, mock_env_vars, name, value):
        mock_env_vars.setenv(name, value)
        with pytest.raises(ConfigurationError):
            load_environment_config()


class TestDuration:
    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("30s", 30),
            ("15m", 900),
            ("1h30m", 5400),
            ("3d", 259200),
            ("PT15M", 900),
            ("PT1H30M", 5400),
            ("P3D", 259200),
            ("pt5m", 300),
        ],
    )
    def test_parse_duration(self, value, seconds):
        assert parse_duration(value) == seconds

    @pytest.mark.parametrize("value", ["", "0m", "P", "PT", "15x", "1h and 5m", "P1W"])
    def test_parse_duration_rejects(self, value):
        with pytest.raises(DurationParseError):
            parse_duration(value)

    def test_parse_timedelta(self):
        assert parse_timedelta("3d").days == 3

    def test_validate_duration_range(self):
        validate_duration_range(300, min_seconds=60, max_seconds=600)
        with pytest.raises(DurationParseError, match="too short"):
            validate_duration_range(30, min_seconds=60, max_seconds=600)
        with pytest.raises(DurationParseError, match="too long"):
            validate_duration_range(700, min_seconds=60, max_seconds=600)

    @pytest.mark.parametrize(
        "seconds,text",
        [(1, "1 second"), (60, "1 minute"), (7200, "2 hours"), (259200, "3 days")],
    )
    def test_seconds_to_human_readable(self, seconds, text):
        assert seconds_to_human_readable(seconds) == text


def test_validate_config_file(tmp_path, capsys):
    assert validate_config_file(EXAMPLE_CONFIG) is True
    assert validate_config_file(write_config(tmp_path, "matching:\n  threshold: 500\n")) is False
    assert "validation failed" in capsys.readouterr().out
