"""
Chain Event Schemas for enzymeml-llm

Lifecycle events emitted by the tool-chain engine. Every event carries a
fresh ChainMetadata snapshot plus a payload specific to its type. Events
are delivered to an optional observer and never stored by the engine.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .tools import ToolErrorType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChainEventType(str, Enum):
    """Tags of the chain lifecycle events."""
    CHAIN_START = "chain_start"
    PLANNING_RESULT = "planning_result"
    NO_TOOLS = "no_tools"
    TOOL_START = "tool_start"
    TOOL_RETRY = "tool_retry"
    TOOL_SUCCESS = "tool_success"
    TOOL_ERROR = "tool_error"
    OUTPUTS_APPENDED = "outputs_appended"
    CHAIN_COMPLETE = "chain_complete"


class ChainMetadata(BaseModel):
    """Read-only context snapshot attached to every event."""
    model_config = ConfigDict(frozen=True)

    depth: int = 1
    total_depth: int = 1
    model: str
    conversation_id: str | None = None
    request_id: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)


class _ChainEventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: ChainMetadata


# =============================================================================
# Chain-level events
# =============================================================================


class ChainStartEvent(_ChainEventBase):
    type: Literal[ChainEventType.CHAIN_START] = ChainEventType.CHAIN_START
    input_size: int


class PlanningResultEvent(_ChainEventBase):
    type: Literal[ChainEventType.PLANNING_RESULT] = ChainEventType.PLANNING_RESULT
    count: int
    tool_names: list[str]
    call_ids: list[str]


class NoToolsEvent(_ChainEventBase):
    type: Literal[ChainEventType.NO_TOOLS] = ChainEventType.NO_TOOLS


class OutputsAppendedEvent(_ChainEventBase):
    type: Literal[ChainEventType.OUTPUTS_APPENDED] = ChainEventType.OUTPUTS_APPENDED
    count: int
    duration_ms: int


class ChainCompleteEvent(_ChainEventBase):
    type: Literal[ChainEventType.CHAIN_COMPLETE] = ChainEventType.CHAIN_COMPLETE
    conversation_length: int


# =============================================================================
# Tool-level events
# =============================================================================


class ToolStartEvent(_ChainEventBase):
    type: Literal[ChainEventType.TOOL_START] = ChainEventType.TOOL_START
    call_id: str
    tool_name: str
    index: int


class ToolRetryEvent(_ChainEventBase):
    """Emitted before a retry; ``attempt`` is the number of the attempt about to run."""
    type: Literal[ChainEventType.TOOL_RETRY] = ChainEventType.TOOL_RETRY
    call_id: str
    tool_name: str
    attempt: int
    next_delay_ms: int
    error: str


class ToolSuccessEvent(_ChainEventBase):
    type: Literal[ChainEventType.TOOL_SUCCESS] = ChainEventType.TOOL_SUCCESS
    call_id: str
    tool_name: str
    duration_ms: int
    result_size: int | None = None
    attempts: int = 1


class ToolErrorEvent(_ChainEventBase):
    type: Literal[ChainEventType.TOOL_ERROR] = ChainEventType.TOOL_ERROR
    call_id: str
    tool_name: str
    error: str
    error_type: ToolErrorType
    attempts: int = 0
    duration_ms: int = 0


ChainEvent = Annotated[
    Union[
        ChainStartEvent,
        PlanningResultEvent,
        NoToolsEvent,
        ToolStartEvent,
        ToolRetryEvent,
        ToolSuccessEvent,
        ToolErrorEvent,
        OutputsAppendedEvent,
        ChainCompleteEvent,
    ],
    Field(discriminator="type"),
]
