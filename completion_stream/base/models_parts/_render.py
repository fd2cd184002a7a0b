"""Rendering helpers shared by the snapshot ``to_dict`` methods."""
from __future__ import annotations

import dataclasses
from typing import Any


def render_value(value: Any) -> Any:
    """Convert parsed structured values into JSON-friendly data.

    Pydantic models are dumped, dataclasses converted with ``asdict`` and
    containers walked recursively; everything else is returned unchanged.
    """
    if hasattr(value, "model_dump"):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, dict):
        return {k: render_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [render_value(v) for v in value]
    return value


__all__ = ["render_value"]
