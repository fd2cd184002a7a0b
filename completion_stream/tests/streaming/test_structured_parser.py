"""Soft structured-output parsing tests."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import pytest
from pydantic import BaseModel

from completion_stream.base.errors import StructuredOutputValidationError
from completion_stream.base.structured import (
    CallableResponseFormat,
    JsonObjectResponseFormat,
    PydanticResponseFormat,
    parse_content,
    parse_tool_arguments,
)


class Location(BaseModel):
    city: str
    units: Literal["c", "f"] = "f"


@dataclass
class Point:
    x: int
    y: int


def test_parse_content_into_pydantic_model():
    fmt = PydanticResponseFormat(Location, "location")
    parsed = parse_content('{"city":"San Francisco","units":"c"}', None, fmt)
    assert parsed == Location(city="San Francisco", units="c")  # nosec B101


def test_parse_content_into_dataclass():
    parsed = parse_content('{"x": 1, "y": 2}', None, PydanticResponseFormat(Point))
    assert parsed == Point(1, 2)  # nosec B101


@pytest.mark.parametrize(
    "content,refusal",
    [
        (None, None),
        ('{"city": "SF"}', "I can't help with that."),
        ('{"city": ', None),
        ('{"units": "kelvin"}', None),
        ("[]", None),
    ],
)
def test_parse_content_is_soft(content, refusal):
    assert parse_content(content, refusal, PydanticResponseFormat(Location)) is None  # nosec B101


def test_parse_failure_is_logged_at_debug(logged_events):
    parse_content('{"city": ', None, PydanticResponseFormat(Location), index=0)
    failures = logged_events("structured.parse_failed")
    assert failures and failures[-1]["reason"] == "invalid_json"  # nosec B101
    assert failures[-1]["index"] == 0  # nosec B101


def test_no_format_means_no_parse():
    assert parse_content('{"a": 1}', None, None) is None  # nosec B101


def test_json_object_format_requires_an_object():
    fmt = JsonObjectResponseFormat()
    assert parse_content('{"a": 1}', None, fmt) == {"a": 1}  # nosec B101
    assert parse_content("[1]", None, fmt) is None  # nosec B101
    with pytest.raises(StructuredOutputValidationError):
        fmt.validate([1])


def test_callable_format_failures_are_soft():
    def only_positive(value):
        if value <= 0:
            raise ValueError("must be positive")
        return value

    fmt = CallableResponseFormat("positive", only_positive)
    assert parse_content("5", None, fmt) == 5  # nosec B101
    assert parse_content("-1", None, fmt) is None  # nosec B101


def test_tool_arguments_use_named_parser_or_plain_json():
    parsers = {"locate": PydanticResponseFormat(Location)}
    assert parse_tool_arguments("locate", '{"city": "Paris"}', parsers) == Location(city="Paris")  # nosec B101
    assert parse_tool_arguments("other", '{"q": 1}', parsers) == {"q": 1}  # nosec B101
    assert parse_tool_arguments("other", "{broken", parsers) is None  # nosec B101
    assert parse_tool_arguments("other", "", parsers) is None  # nosec B101


def test_pydantic_format_renders_request_param():
    param = PydanticResponseFormat(Location, "location").to_param()
    assert param["type"] == "json_schema"  # nosec B101
    assert param["json_schema"]["name"] == "location"  # nosec B101
    assert param["json_schema"]["strict"] is True  # nosec B101
    assert "city" in param["json_schema"]["schema"]["properties"]  # nosec B101
