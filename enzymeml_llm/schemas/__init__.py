"""
Schemas for enzymeml-llm

Pydantic models shared across the package:
- tools: ToolSpec, ToolCall, ToolResult
- events: chain lifecycle events
- streaming: stream items and the final response
- conversation: messages and function-call entries
- entities: SmallMolecule, Protein, Reaction
- document: the EnzymeML v2 document
"""

from .tools import (
    ToolSpec,
    ToolCall,
    ToolResult,
    ToolErrorType,
)

from .events import (
    ChainEventType,
    ChainMetadata,
    ChainEvent,
    ChainStartEvent,
    PlanningResultEvent,
    NoToolsEvent,
    ToolStartEvent,
    ToolRetryEvent,
    ToolSuccessEvent,
    ToolErrorEvent,
    OutputsAppendedEvent,
    ChainCompleteEvent,
)

from .streaming import (
    TextDelta,
    RefusalDelta,
    StreamError,
    StreamItem,
    FinalResponse,
)

from .conversation import (
    Message,
    FunctionCall,
    FunctionCallOutput,
    ConversationItem,
    Conversation,
    as_conversation_item,
)

from .entities import (
    SmallMolecule,
    Protein,
    Reaction,
    ReactionElement,
    ModifierElement,
    ModifierRole,
    Equation,
    EquationType,
    Variable,
)

from .document import (
    EnzymeMLDocument,
    Creator,
    Vessel,
    Complex,
    Parameter,
    Measurement,
    MeasurementData,
    UnitDefinition,
    BaseUnit,
    DataTypes,
    UnitType,
)

__all__ = [
    # Tool schemas
    "ToolSpec",
    "ToolCall",
    "ToolResult",
    "ToolErrorType",
    # Event schemas
    "ChainEventType",
    "ChainMetadata",
    "ChainEvent",
    "ChainStartEvent",
    "PlanningResultEvent",
    "NoToolsEvent",
    "ToolStartEvent",
    "ToolRetryEvent",
    "ToolSuccessEvent",
    "ToolErrorEvent",
    "OutputsAppendedEvent",
    "ChainCompleteEvent",
    # Streaming schemas
    "TextDelta",
    "RefusalDelta",
    "StreamError",
    "StreamItem",
    "FinalResponse",
    # Conversation schemas
    "Message",
    "FunctionCall",
    "FunctionCallOutput",
    "ConversationItem",
    "Conversation",
    "as_conversation_item",
    # Entity schemas
    "SmallMolecule",
    "Protein",
    "Reaction",
    "ReactionElement",
    "ModifierElement",
    "ModifierRole",
    "Equation",
    "EquationType",
    "Variable",
    # Document schemas
    "EnzymeMLDocument",
    "Creator",
    "Vessel",
    "Complex",
    "Parameter",
    "Measurement",
    "MeasurementData",
    "UnitDefinition",
    "BaseUnit",
    "DataTypes",
    "UnitType",
]
