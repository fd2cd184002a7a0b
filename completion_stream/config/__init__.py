"""Configuration layer for the stream accumulator.

Sources are merged in a predictable order, later ones winning:
    1. Built-in defaults (``completion_stream.config.defaults``)
    2. Environment variables (``COMPLETION_STREAM_STRICT_FINISH``,
       ``COMPLETION_STREAM_LOG_LEVEL``, ``COMPLETION_STREAM_JSON_LOGS``,
       ``COMPLETION_STREAM_TRACE``)
    3. Optional JSON file pointed to by ``COMPLETION_STREAM_CONFIG_FILE``
    4. In-code overrides passed to :func:`get_stream_config`

Example config file::

    {"strict_finish": true, "log_level": "DEBUG", "trace_enabled": false}

Public API
----------
* StreamConfig
* get_stream_config(overrides: dict | None = None) -> StreamConfig
* configure_logging(config: StreamConfig | None = None) -> logging.Logger
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .defaults import (
    ENV_CONFIG_FILE,
    ENV_JSON_LOGS,
    ENV_LOG_LEVEL,
    ENV_STRICT_FINISH,
    ENV_TRACE,
    JSON_LOGS_DEFAULT,
    LOG_LEVEL_DEFAULT,
    STRICT_FINISH_DEFAULT,
    TRACE_ENABLED_DEFAULT,
)
from .env import env_bool, env_level, parse_bool, parse_level


@dataclass(frozen=True)
class StreamConfig:
    """Resolved settings for one :class:`ChatCompletionStream`.

    Attributes:
        strict_finish: Treat a delta for an already-finished choice as a
            terminal protocol error instead of logging and ignoring it.
        log_level: Level name :func:`configure_logging` applies to the shared
            logger, or ``None`` to leave it alone.
        json_logs: Emit JSON lines (``True``) or plain text.
        trace_enabled: Record an OpenTelemetry span per stream.
    """

    strict_finish: bool = STRICT_FINISH_DEFAULT
    log_level: Optional[str] = LOG_LEVEL_DEFAULT
    json_logs: bool = JSON_LOGS_DEFAULT
    trace_enabled: bool = TRACE_ENABLED_DEFAULT


def _from_env() -> Dict[str, Any]:
    values = {
        "strict_finish": env_bool(ENV_STRICT_FINISH),
        "log_level": env_level(ENV_LOG_LEVEL),
        "json_logs": env_bool(ENV_JSON_LOGS),
        "trace_enabled": env_bool(ENV_TRACE),
    }
    return {k: v for k, v in values.items() if v is not None}


def _load_file(path: str) -> Dict[str, Any]:
    """Load the JSON config file; a missing or unreadable file yields ``{}``."""
    p = Path(path).expanduser()
    if not p.is_file():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep known keys only, normalising string spellings of bools and levels."""
    known = {f.name for f in fields(StreamConfig)}
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known or value is None:
            continue
        if key == "log_level":
            value = parse_level(str(value))
            if value is None:
                continue
        elif isinstance(value, str):
            value = parse_bool(value)
            if value is None:
                continue
        else:
            value = bool(value)
        out[key] = value
    return out


def get_stream_config(overrides: Optional[Mapping[str, Any]] = None) -> StreamConfig:
    """Resolve a :class:`StreamConfig` from all configuration sources."""
    cfg = StreamConfig()
    cfg = replace(cfg, **_from_env())
    file_path = os.getenv(ENV_CONFIG_FILE)
    if file_path:
        cfg = replace(cfg, **_coerce(_load_file(file_path)))
    if overrides:
        cfg = replace(cfg, **_coerce(overrides))
    return cfg


def configure_logging(config: Optional[StreamConfig] = None) -> logging.Logger:
    """Apply ``log_level`` and ``json_logs`` to the shared logger.

    Call once at application start-up; streams never change the logger
    themselves, so a level set here holds for all of them.
    """
    # imported here: the base package imports this module
    from ..base.logging import get_logger, set_level

    cfg = config or get_stream_config()
    logger = get_logger(json_mode=cfg.json_logs)
    if cfg.log_level is not None:
        set_level(cfg.log_level)
    return logger


__all__ = ["StreamConfig", "configure_logging", "get_stream_config"]
