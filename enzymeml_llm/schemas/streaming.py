"""
Streaming Schemas for enzymeml-llm

StreamItem is one increment of a model's streaming response, and
FinalResponse is what the completion future resolves to.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class TextDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    delta: str


class RefusalDelta(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["refusal"] = "refusal"
    delta: str


class StreamError(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: Literal["error"] = "error"
    error: Any


StreamItem = Annotated[
    Union[TextDelta, RefusalDelta, StreamError],
    Field(discriminator="kind"),
]


class FinalResponse(BaseModel):
    """The completed response of a streaming request."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    model: str
    output_text: str = ""
    refusal: str | None = None
    output_parsed: Any = None
    finish_reason: str | None = None
    usage: dict[str, int] = Field(default_factory=dict)
