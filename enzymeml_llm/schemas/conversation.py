"""
Conversation Schemas for enzymeml-llm

A Conversation is an ordered list of role-tagged messages plus, once tools
have run, function-call and function-call-output entries.
"""

from typing import Any, Literal, Union

from pydantic import BaseModel

from .tools import ToolCall, ToolResult


Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """A role-tagged message. ``content`` is text or a list of content parts."""
    type: Literal["message"] = "message"
    role: Role
    content: Any


class FunctionCall(BaseModel):
    """Records a tool call requested by the model."""
    type: Literal["function_call"] = "function_call"
    call_id: str
    name: str
    arguments: str = ""

    @classmethod
    def from_call(cls, call: ToolCall) -> "FunctionCall":
        return cls(call_id=call.call_id, name=call.name, arguments=call.arguments)


class FunctionCallOutput(BaseModel):
    """Carries the JSON output of a tool call back to the model."""
    type: Literal["function_call_output"] = "function_call_output"
    call_id: str
    output: str

    @classmethod
    def from_result(cls, result: ToolResult) -> "FunctionCallOutput":
        return cls(call_id=result.call_id, output=result.output)


ConversationItem = Union[Message, FunctionCall, FunctionCallOutput]
Conversation = list[ConversationItem]


def as_conversation_item(item: Any) -> ConversationItem:
    """Coerce a raw ``{"role": ..., "content": ...}`` dict or an item model."""
    if isinstance(item, (Message, FunctionCall, FunctionCallOutput)):
        return item
    if isinstance(item, dict):
        kind = item.get("type", "message")
        if kind == "function_call":
            return FunctionCall.model_validate(item)
        if kind == "function_call_output":
            return FunctionCallOutput.model_validate(item)
        return Message.model_validate(item)
    raise TypeError(f"Cannot use {type(item).__name__} as a conversation item")
