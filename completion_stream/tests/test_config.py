"""Config layering tests: defaults, environment, JSON file, overrides."""
from __future__ import annotations

import json

import pytest

from completion_stream.config import StreamConfig, get_stream_config
from completion_stream.config.env import parse_bool, parse_level

ENV_KEYS = (
    "COMPLETION_STREAM_STRICT_FINISH",
    "COMPLETION_STREAM_LOG_LEVEL",
    "COMPLETION_STREAM_JSON_LOGS",
    "COMPLETION_STREAM_TRACE",
    "COMPLETION_STREAM_CONFIG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    assert get_stream_config() == StreamConfig()  # nosec B101
    cfg = StreamConfig()
    assert cfg.strict_finish is False and cfg.json_logs is True and cfg.trace_enabled is True  # nosec B101
    assert cfg.log_level is None  # nosec B101


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("COMPLETION_STREAM_STRICT_FINISH", "yes")
    monkeypatch.setenv("COMPLETION_STREAM_LOG_LEVEL", "debug")
    monkeypatch.setenv("COMPLETION_STREAM_TRACE", "off")
    cfg = get_stream_config()
    assert cfg.strict_finish is True  # nosec B101
    assert cfg.log_level == "DEBUG"  # nosec B101
    assert cfg.trace_enabled is False  # nosec B101


def test_unrecognised_env_values_fall_back(monkeypatch):
    monkeypatch.setenv("COMPLETION_STREAM_STRICT_FINISH", "maybe")
    monkeypatch.setenv("COMPLETION_STREAM_LOG_LEVEL", "loud")
    cfg = get_stream_config()
    assert cfg.strict_finish is False and cfg.log_level is None  # nosec B101


def test_file_then_overrides(monkeypatch, tmp_path):
    path = tmp_path / "stream.json"
    path.write_text(json.dumps({"strict_finish": True, "json_logs": "false", "unknown": 1}), encoding="utf-8")
    monkeypatch.setenv("COMPLETION_STREAM_CONFIG_FILE", str(path))
    monkeypatch.setenv("COMPLETION_STREAM_STRICT_FINISH", "0")
    cfg = get_stream_config()
    assert cfg.strict_finish is True and cfg.json_logs is False  # nosec B101
    cfg = get_stream_config({"strict_finish": False, "log_level": "warning"})
    assert cfg.strict_finish is False and cfg.log_level == "WARNING"  # nosec B101


def test_missing_or_invalid_file_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("COMPLETION_STREAM_CONFIG_FILE", str(tmp_path / "absent.json"))
    assert get_stream_config() == StreamConfig()  # nosec B101
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    monkeypatch.setenv("COMPLETION_STREAM_CONFIG_FILE", str(bad))
    assert get_stream_config() == StreamConfig()  # nosec B101


@pytest.mark.parametrize(
    "raw,expected",
    [("1", True), ("TRUE", True), (" on ", True), ("no", False), ("0", False), ("", None), (None, None)],
)
def test_parse_bool(raw, expected):
    assert parse_bool(raw) is expected  # nosec B101


def test_parse_level():
    assert parse_level("warn") == "WARN"  # nosec B101
    assert parse_level("verbose") is None  # nosec B101
