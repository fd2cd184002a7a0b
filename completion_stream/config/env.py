"""completion_stream.config.env
=============================

Tolerant parsers for configuration values read from the environment.

Failure Modes
-------------
Helpers never raise on unset or unrecognised values; they return ``None`` so
the caller can fall back to the next configuration source.
"""

from __future__ import annotations

import os
from typing import Optional

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})
_LEVELS = frozenset({"DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"})


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """Return the boolean spelled by ``value`` or ``None`` when unrecognised.

    Accepts ``1/0``, ``true/false``, ``yes/no`` and ``on/off`` in any case,
    ignoring surrounding whitespace.
    """
    if value is None:
        return None
    v = value.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return None


def parse_level(value: Optional[str]) -> Optional[str]:
    """Normalise a logging level name; unknown names yield ``None``."""
    if value is None:
        return None
    v = value.strip().upper()
    return v if v in _LEVELS else None


def env_bool(name: str) -> Optional[bool]:
    return parse_bool(os.getenv(name))


def env_level(name: str) -> Optional[str]:
    return parse_level(os.getenv(name))


__all__ = ["parse_bool", "parse_level", "env_bool", "env_level"]
