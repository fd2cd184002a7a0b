"""Response-format descriptors for structured output.

A response format is anything with a ``schema_name`` and a
``validate(value)`` method returning the typed value or raising when the
value does not conform. The accumulator never inspects the schema itself, so
any validation library can provide one; pydantic is the built-in adapter.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Optional, Protocol, TypeVar, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from ..errors import StructuredOutputValidationError

T = TypeVar("T")


@runtime_checkable
class ResponseFormat(Protocol):
    """Structural contract for structured-output schemas.

    Attributes:
        schema_name: Name of the schema (sent to the server as
            ``json_schema.name`` when the request is built).

    ``validate`` receives the JSON-decoded content and returns the typed
    value. It raises (any exception) when the value does not conform.
    """

    schema_name: str

    def validate(self, value: Any) -> Any:
        ...


class PydanticResponseFormat(Generic[T]):
    """Response format backed by a pydantic ``TypeAdapter``.

    Works for ``BaseModel`` subclasses, dataclasses, ``TypedDict`` and any
    other type pydantic can validate.

    Parameters
    ----------
    tp:
        The target type.
    name:
        Schema name; defaults to the type's ``__name__``.
    strict:
        Value of ``json_schema.strict`` in :meth:`to_param`.
    """

    def __init__(self, tp: type[T], name: Optional[str] = None, *, strict: bool = True) -> None:
        self.type = tp
        self.schema_name = name or getattr(tp, "__name__", "response")
        self.strict = strict
        self._adapter: TypeAdapter[T] = TypeAdapter(tp)

    def validate(self, value: Any) -> T:
        try:
            return self._adapter.validate_python(value)
        except ValidationError as exc:
            raise StructuredOutputValidationError(
                message=f"content does not match schema {self.schema_name!r}",
                raw=exc,
            ) from exc

    def json_schema(self) -> Dict[str, Any]:
        return self._adapter.json_schema()

    def to_param(self) -> Dict[str, Any]:
        """Render the ``response_format`` request parameter for this schema."""
        return {
            "type": "json_schema",
            "json_schema": {
                "name": self.schema_name,
                "schema": self.json_schema(),
                "strict": self.strict,
            },
        }

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"PydanticResponseFormat({self.schema_name!r})"


class JsonObjectResponseFormat:
    """``json_object`` mode: any JSON object is accepted as-is."""

    schema_name = "json_object"

    def validate(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            raise StructuredOutputValidationError(
                message=f"expected a JSON object, got {type(value).__name__}",
            )
        return value

    def to_param(self) -> Dict[str, Any]:
        return {"type": "json_object"}


class CallableResponseFormat:
    """Wrap a plain validator callable ``fn(value) -> typed value``."""

    def __init__(self, name: str, fn: Callable[[Any], Any]) -> None:
        self.schema_name = name
        self._fn = fn

    def validate(self, value: Any) -> Any:
        return self._fn(value)


__all__ = [
    "ResponseFormat",
    "PydanticResponseFormat",
    "JsonObjectResponseFormat",
    "CallableResponseFormat",
]
