"""Tool declaration, schema conversion and invocation layer.

This package provides the ToolRegistry, the typed tool/argument data types,
and the calendar tools bound to the scheduling service.
"""

from agenda_server.tools.calendar import CalendarTools, register_calendar_tools
from agenda_server.tools.registry import ToolRegistry, coerce_argument
from agenda_server.tools.types import (
    ArgumentKind,
    ArgumentValue,
    ParameterType,
    ToolDescriptor,
    ToolInvocationRequest,
    ToolParameter,
)

__all__ = [
    "ArgumentKind",
    "ArgumentValue",
    "CalendarTools",
    "ParameterType",
    "ToolDescriptor",
    "ToolInvocationRequest",
    "ToolParameter",
    "ToolRegistry",
    "coerce_argument",
    "register_calendar_tools",
]
