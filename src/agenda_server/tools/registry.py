"""ToolRegistry for declaring and invoking tools.

This module provides the ToolRegistry class which handles:
- Registering tool descriptors with unique names
- Describing tools in registration order
- Converting descriptors to Ollama-compatible function schemas
- Validating and coercing model-produced arguments before invocation
"""

import logging
from collections.abc import Iterator
from datetime import date, datetime, time
from typing import Any

from agenda_server.errors import ArgumentValidationError, DuplicateTool, UnknownTool
from agenda_server.tools.types import (
    ArgumentKind,
    ArgumentValue,
    ParameterType,
    ToolDescriptor,
    ToolParameter,
)

logger = logging.getLogger(__name__)

# JSON schema type and format hint sent to the model for each parameter type
_SCHEMA_TYPES: dict[ParameterType, tuple[str, str | None]] = {
    ParameterType.STRING: ("string", None),
    ParameterType.INTEGER: ("integer", None),
    ParameterType.NUMBER: ("number", None),
    ParameterType.BOOLEAN: ("boolean", None),
    ParameterType.DATE: ("string", "YYYY-MM-DD"),
    ParameterType.TIME: ("string", "HH:MM"),
    ParameterType.DATETIME: ("string", "ISO 8601 date-time"),
}


def _coerce_string(value: ArgumentValue) -> str:
    if value.kind == ArgumentKind.STRING:
        return value.raw
    if value.kind in (ArgumentKind.INTEGER, ArgumentKind.NUMBER):
        return str(value.raw)
    raise ValueError(f"expected a string, got {value.kind.value}")


def _coerce_integer(value: ArgumentValue) -> int:
    if value.kind == ArgumentKind.INTEGER:
        return value.raw
    if value.kind == ArgumentKind.NUMBER and float(value.raw).is_integer():
        return int(value.raw)
    if value.kind == ArgumentKind.STRING:
        try:
            return int(value.raw.strip())
        except ValueError:
            raise ValueError(f"'{value.raw}' is not an integer") from None
    raise ValueError(f"expected an integer, got {value.kind.value}")


def _coerce_number(value: ArgumentValue) -> float:
    if value.kind in (ArgumentKind.INTEGER, ArgumentKind.NUMBER):
        return float(value.raw)
    if value.kind == ArgumentKind.STRING:
        try:
            return float(value.raw.strip())
        except ValueError:
            raise ValueError(f"'{value.raw}' is not a number") from None
    raise ValueError(f"expected a number, got {value.kind.value}")


def _coerce_boolean(value: ArgumentValue) -> bool:
    if value.kind == ArgumentKind.BOOLEAN:
        return value.raw
    if value.kind == ArgumentKind.STRING:
        lowered = value.raw.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
    raise ValueError(f"expected a boolean, got {value.kind.value}")


def _coerce_date(value: ArgumentValue) -> date:
    text = _coerce_string(value).strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"'{text}' is not a valid date in YYYY-MM-DD format") from None


def _coerce_time(value: ArgumentValue) -> time:
    text = _coerce_string(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"'{text}' is not a valid time in HH:MM format")


def _coerce_datetime(value: ArgumentValue) -> datetime:
    text = _coerce_string(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"'{text}' is not a valid ISO 8601 date-time") from None


_COERCERS = {
    ParameterType.STRING: _coerce_string,
    ParameterType.INTEGER: _coerce_integer,
    ParameterType.NUMBER: _coerce_number,
    ParameterType.BOOLEAN: _coerce_boolean,
    ParameterType.DATE: _coerce_date,
    ParameterType.TIME: _coerce_time,
    ParameterType.DATETIME: _coerce_datetime,
}


def coerce_argument(parameter: ToolParameter, value: ArgumentValue) -> Any:
    """Coerce a raw argument to the parameter's declared type.

    Args:
        parameter: The parameter declaration
        value: The tagged raw value from the model

    Returns:
        The typed value

    Raises:
        ArgumentValidationError: If the value cannot be coerced
    """
    try:
        return _COERCERS[parameter.type](value)
    except ValueError as e:
        raise ArgumentValidationError(parameter.name, str(e)) from e


class ToolRegistry:
    """Closed set of named, typed operations exposed to the model.

    The registry knows nothing about what its tools do. It is populated at
    startup and frozen before being shared across sessions.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False

    def register(self, descriptor: ToolDescriptor) -> None:
        """Register a tool descriptor.

        Args:
            descriptor: The tool to register

        Raises:
            DuplicateTool: If a tool with the same name is already registered
            RuntimeError: If the registry has been frozen
        """
        if self._frozen:
            raise RuntimeError("Cannot register tools after the registry is frozen")
        if descriptor.name in self._tools:
            raise DuplicateTool(
                f"Tool '{descriptor.name}' is already registered",
                details={"tool": descriptor.name},
            )
        self._tools[descriptor.name] = descriptor
        logger.debug(f"Registered tool {descriptor.name}")

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True
        logger.info(f"Tool registry frozen with {len(self._tools)} tools")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def describe_all(self) -> Iterator[ToolDescriptor]:
        """Iterate over descriptors in registration order."""
        return iter(tuple(self._tools.values()))

    def to_ollama_tools(self) -> list[dict[str, Any]]:
        """Convert all descriptors to Ollama function-calling schemas.

        Returns:
            List of tool dicts: [{"type": "function", "function": {...}}, ...]
        """
        tools = []
        for descriptor in self.describe_all():
            properties: dict[str, Any] = {}
            required: list[str] = []
            for parameter in descriptor.parameters:
                schema_type, format_hint = _SCHEMA_TYPES[parameter.type]
                description = parameter.description
                if format_hint and format_hint not in description:
                    description = f"{description} (format: {format_hint})"
                properties[parameter.name] = {
                    "type": schema_type,
                    "description": description,
                }
                if parameter.required:
                    required.append(parameter.name)

            tools.append(
                {
                    "type": "function",
                    "function": {
                        "name": descriptor.name,
                        "description": descriptor.description,
                        "parameters": {
                            "type": "object",
                            "properties": properties,
                            "required": required,
                        },
                    },
                }
            )
        return tools

    async def invoke(self, name: str, arguments: dict[str, ArgumentValue]) -> str:
        """Validate arguments and call a tool's handler.

        Args:
            name: Tool name requested by the model
            arguments: Tagged raw argument values

        Returns:
            The handler's result text

        Raises:
            UnknownTool: If no tool with this name is registered
            ArgumentValidationError: If an argument is missing or invalid
        """
        descriptor = self._tools.get(name)
        if descriptor is None:
            raise UnknownTool(f"Tool '{name}' does not exist", details={"tool": name})

        kwargs: dict[str, Any] = {}
        for parameter in descriptor.parameters:
            value = arguments.get(parameter.name)
            if value is None or value.kind == ArgumentKind.NULL:
                if parameter.required:
                    raise ArgumentValidationError(parameter.name, "a value is required")
                continue
            kwargs[parameter.name] = coerce_argument(parameter, value)

        declared = {parameter.name for parameter in descriptor.parameters}
        ignored = sorted(set(arguments) - declared)
        if ignored:
            logger.debug(f"Ignoring undeclared arguments for {name}: {ignored}")

        logger.info(f"Invoking tool {name}")
        return await descriptor.handler(**kwargs)
