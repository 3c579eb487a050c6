"""Data types for tool declaration and invocation.

Arguments produced by the model are never trusted as already typed: each raw
JSON value is wrapped in an ArgumentValue tagged with the JSON kind it arrived
as, and only coerced to the declared parameter type at invocation time.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParameterType(str, Enum):
    """Declared type of a tool parameter."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"  # YYYY-MM-DD
    TIME = "time"  # HH:MM
    DATETIME = "datetime"  # ISO 8601


class ArgumentKind(str, Enum):
    """JSON kind of a raw argument value as produced by the model."""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class ArgumentValue:
    """A raw model-produced argument tagged with its JSON kind."""

    kind: ArgumentKind
    raw: Any

    @classmethod
    def from_json(cls, value: Any) -> "ArgumentValue":
        """Wrap a decoded JSON value.

        Args:
            value: Any value produced by json decoding

        Returns:
            ArgumentValue tagged with the matching kind
        """
        # bool is a subclass of int, so it must be checked first
        if value is None:
            return cls(ArgumentKind.NULL, None)
        if isinstance(value, bool):
            return cls(ArgumentKind.BOOLEAN, value)
        if isinstance(value, int):
            return cls(ArgumentKind.INTEGER, value)
        if isinstance(value, float):
            return cls(ArgumentKind.NUMBER, value)
        if isinstance(value, str):
            return cls(ArgumentKind.STRING, value)
        if isinstance(value, (list, tuple)):
            return cls(ArgumentKind.ARRAY, list(value))
        if isinstance(value, dict):
            return cls(ArgumentKind.OBJECT, dict(value))
        return cls(ArgumentKind.STRING, str(value))


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A single tool call requested by the model."""

    name: str
    arguments: dict[str, ArgumentValue] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, name: str, arguments: dict[str, Any]) -> "ToolInvocationRequest":
        """Build a request from a decoded argument mapping."""
        return cls(
            name=name,
            arguments={key: ArgumentValue.from_json(value) for key, value in arguments.items()},
        )

    def raw_arguments(self) -> dict[str, Any]:
        """Return the arguments as plain JSON values."""
        return {key: value.raw for key, value in self.arguments.items()}


ToolHandler = Callable[..., Awaitable[str]]


@dataclass(frozen=True)
class ToolParameter:
    """A typed parameter of a tool."""

    name: str
    type: ParameterType
    description: str
    required: bool = True


@dataclass(frozen=True)
class ToolDescriptor:
    """A named operation the model may request.

    Attributes:
        name: Unique tool name
        description: Human-readable description sent to the model
        parameters: Ordered parameter declarations
        handler: Async callable receiving the coerced arguments as keywords
    """

    name: str
    description: str
    parameters: tuple[ToolParameter, ...]
    handler: ToolHandler
