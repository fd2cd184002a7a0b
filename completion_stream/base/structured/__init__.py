"""Structured-output support: response formats and the soft parser."""

from .response_format import (
    ResponseFormat,
    PydanticResponseFormat,
    JsonObjectResponseFormat,
    CallableResponseFormat,
)
from .parser import parse_content, parse_tool_arguments

__all__ = [
    "ResponseFormat",
    "PydanticResponseFormat",
    "JsonObjectResponseFormat",
    "CallableResponseFormat",
    "parse_content",
    "parse_tool_arguments",
]
