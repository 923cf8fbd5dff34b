"""
Tool Schemas for enzymeml-llm

This module defines the Pydantic schemas exchanged between the model and
the tool-chain engine:
- ToolSpec: a capability declared to the model
- ToolCall: a model-requested invocation with raw JSON arguments
- ToolResult: the paired outcome of executing one ToolCall
"""

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Declared Tools
# =============================================================================


class ToolSpec(BaseModel):
    """Declaration of a tool offered to the model."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique tool name as seen by the model")
    description: str = Field(default="", description="What the tool does")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON schema of the tool arguments",
    )
    strict: bool = Field(
        default=False,
        description=(
            "Strict function calling; the schema must then list every property "
            "as required and set additionalProperties to false"
        ),
    )

    @model_validator(mode="after")
    def _check_strict_schema(self) -> "ToolSpec":
        if not self.strict:
            return self
        if self.parameters.get("additionalProperties") is not False:
            raise ValueError(f"Strict tool '{self.name}' must set additionalProperties to false")
        missing = sorted(set(self.parameters.get("properties") or {}) - set(self.parameters.get("required") or []))
        if missing:
            raise ValueError(f"Strict tool '{self.name}' must require every property: {', '.join(missing)}")
        return self

    def to_openai(self) -> dict[str, Any]:
        """Render the spec in the chat-completions function format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
                "strict": self.strict,
            },
        }


# =============================================================================
# Calls and Results
# =============================================================================


class ToolErrorType(str, Enum):
    """Kinds of tool failures carried in error envelopes."""
    INVALID_ARGUMENTS = "invalid_arguments"
    UNKNOWN_TOOL = "unknown_tool"
    TIMEOUT = "timeout"
    EXECUTION_ERROR = "execution_error"


class ToolCall(BaseModel):
    """A tool invocation requested by the model in a planning response."""
    model_config = ConfigDict(frozen=True)

    call_id: str = Field(description="Provider-assigned call identifier")
    name: str = Field(description="Name of the requested tool")
    arguments: str = Field(default="", description="Raw, unparsed JSON arguments")
    index: int = Field(default=0, ge=0, description="Zero-based emission order")


class ToolResult(BaseModel):
    """Outcome of one executed ToolCall.

    ``output`` always holds JSON text: the serialized payload on success,
    an error envelope (an object with an ``error`` field) otherwise.
    """
    model_config = ConfigDict(frozen=True)

    call_id: str
    name: str
    output: str
    success: bool
    error_type: ToolErrorType | None = None
    attempts: int = 0
    duration_ms: int = 0

    @classmethod
    def failure(
        cls,
        call: ToolCall,
        error_type: ToolErrorType,
        message: str,
        attempts: int = 0,
        duration_ms: int = 0,
        **details: Any,
    ) -> "ToolResult":
        """Build an error result whose output is a JSON error envelope."""
        envelope: dict[str, Any] = {
            "error": message,
            "error_type": error_type.value,
            "tool": call.name,
        }
        if attempts:
            envelope["attempts"] = attempts
        envelope.update(details)
        return cls(
            call_id=call.call_id,
            name=call.name,
            output=json.dumps(envelope, default=str),
            success=False,
            error_type=error_type,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    def payload(self) -> Any:
        """Deserialize the output text."""
        return json.loads(self.output)
