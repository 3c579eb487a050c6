"""Pydantic models for chat API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    """Request body for POST /api/v1/chat/{session_id}."""

    message: str = Field(
        min_length=1,
        description="The user message to send.",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "What do I have planned this week?"},
                {"message": "Book a dentist appointment tomorrow at 10:00"},
            ]
        }
    )


class ToolCallResponse(BaseModel):
    """One tool invocation executed while answering."""

    name: str = Field(description="Tool name")
    arguments: dict = Field(description="Arguments as sent by the model")
    result: str = Field(description="Text returned to the model")
    error: bool = Field(default=False, description="Whether the tool failed")


class ChatResponse(BaseModel):
    """Response body for the chat endpoint."""

    session_id: str = Field(description="Session identifier")
    message: str = Field(description="The assistant's final reply")
    outcome: str = Field(
        description="How the turn ended: completed, model_failure or iteration_limit"
    )
    iterations: int = Field(description="Number of completion requests made")
    tool_calls_executed: list[ToolCallResponse] = Field(
        default_factory=list,
        description="Tools executed while answering, in order",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "session_id": "alice",
                "message": "Event 'Dentist' created successfully for 2025-01-16 10:00.",
                "outcome": "completed",
                "iterations": 2,
                "tool_calls_executed": [
                    {
                        "name": "create_event",
                        "arguments": {
                            "summary": "Dentist",
                            "date": "2025-01-16",
                            "start_time": "10:00",
                        },
                        "result": "Event 'Dentist' created successfully for 2025-01-16 10:00.",
                        "error": False,
                    }
                ],
            }
        }
    )
