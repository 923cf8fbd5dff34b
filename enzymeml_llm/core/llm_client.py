"""
LLM Client for enzymeml-llm

This module provides a wrapper around LiteLLM for the two model calls the
extraction pipeline makes:
- a planning call that forces the model to request tool calls
- a streaming call whose deltas are delivered to named listeners while the
  final, schema-validated response resolves separately
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Iterable

import litellm
from litellm import acompletion
from litellm.utils import type_to_response_format_param
from pydantic import BaseModel, create_model

from ..config.settings import LLMSettings
from ..schemas.conversation import (
    ConversationItem,
    FunctionCall,
    FunctionCallOutput,
    as_conversation_item,
)
from ..schemas.streaming import FinalResponse
from ..schemas.tools import ToolCall, ToolSpec
from .providers import get_litellm_model_name, is_reasoning_model


logger = logging.getLogger(__name__)

TEXT_DELTA = "response.output_text.delta"
REFUSAL_DELTA = "response.refusal.delta"
ERROR = "response.error"
STREAM_EVENTS = (TEXT_DELTA, REFUSAL_DELTA, ERROR)


@dataclass
class LLMConfig:
    """Configuration for the LLM client."""
    model: str = "gpt-4o"
    temperature: float = 0.0
    max_tokens: int | None = None
    api_key: str | None = None
    api_base: str | None = None
    timeout: int = 120


def to_chat_messages(conversation: Iterable[ConversationItem | dict]) -> list[dict[str, Any]]:
    """
    Convert conversation items to chat-completions messages.

    Consecutive function calls become one assistant message with
    ``tool_calls``; every function-call output becomes a ``tool`` message.
    """
    messages: list[dict[str, Any]] = []
    pending: dict[str, Any] | None = None

    for raw in conversation:
        item = as_conversation_item(raw)

        if isinstance(item, FunctionCall):
            if pending is None:
                pending = {"role": "assistant", "content": None, "tool_calls": []}
                messages.append(pending)
            pending["tool_calls"].append({
                "id": item.call_id,
                "type": "function",
                "function": {"name": item.name, "arguments": item.arguments},
            })
            continue

        pending = None
        if isinstance(item, FunctionCallOutput):
            messages.append({
                "role": "tool",
                "tool_call_id": item.call_id,
                "content": item.output,
            })
        else:
            messages.append({"role": item.role, "content": item.content})

    return messages


def wrap_multiple(schema: type[BaseModel]) -> type[BaseModel]:
    """Wrap a schema as ``{"items": [schema]}``."""
    return create_model(f"{schema.__name__}List", items=(list[schema], ...))


def build_response_format(schema: type[BaseModel], schema_key: str = "data") -> dict[str, Any]:
    """Bind a pydantic schema as a strict JSON-schema response format."""
    response_format = type_to_response_format_param(schema)
    response_format["json_schema"]["name"] = schema_key
    return response_format


def _usage_dict(usage: Any) -> dict[str, int]:
    if usage is None:
        return {}
    return {
        "prompt_tokens": getattr(usage, "prompt_tokens", 0) or 0,
        "completion_tokens": getattr(usage, "completion_tokens", 0) or 0,
        "total_tokens": getattr(usage, "total_tokens", 0) or 0,
    }


class ResponseStream:
    """
    Handle on one streaming model response.

    Listeners subscribe by event name (``response.output_text.delta``,
    ``response.refusal.delta``, ``response.error``). The request starts on
    ``start()`` (or the first ``final_response()``); the completion future
    resolves to a FinalResponse once the stream ends, or fails with the
    error that ended it.
    """

    def __init__(
        self,
        open_stream: Callable[[], Awaitable[AsyncIterator[Any]]],
        model: str,
        response_model: type[BaseModel] | None = None,
        on_complete: Callable[[FinalResponse], None] | None = None,
    ):
        self.model = model
        self.response_model = response_model
        self._open_stream = open_stream
        self._on_complete = on_complete
        self._listeners: dict[str, list[Callable[[Any], None]]] = {name: [] for name in STREAM_EVENTS}
        self._task: asyncio.Task | None = None
        self._final: asyncio.Future | None = None

    def on(self, event: str, listener: Callable[[Any], None]) -> "ResponseStream":
        """Subscribe a listener to a stream event."""
        if event not in self._listeners:
            raise ValueError(f"Unknown stream event: {event}")
        self._listeners[event].append(listener)
        return self

    def start(self) -> asyncio.Future:
        """Start the request if needed and return the completion future."""
        if self._task is None:
            loop = asyncio.get_running_loop()
            self._final = loop.create_future()
            self._task = loop.create_task(self._pump())
        return self._final

    @property
    def started(self) -> bool:
        return self._task is not None

    async def final_response(self) -> FinalResponse:
        """Wait for the completed, validated response."""
        return await self.start()

    async def close(self) -> None:
        """Cancel the underlying request."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    def _dispatch(self, event: str, payload: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(payload)
            except Exception:
                logger.exception("Stream listener failed on %s", event)

    def _parse(self, output_text: str) -> Any:
        if self.response_model is None or not output_text:
            return None
        return self.response_model.model_validate_json(output_text)

    async def _pump(self) -> None:
        text_parts: list[str] = []
        refusal_parts: list[str] = []
        finish_reason = None
        usage: dict[str, int] = {}
        model = self.model

        try:
            chunks = await self._open_stream()
            async for chunk in chunks:
                model = getattr(chunk, "model", None) or model
                if getattr(chunk, "usage", None):
                    usage = _usage_dict(chunk.usage)

                for choice in getattr(chunk, "choices", None) or []:
                    delta = getattr(choice, "delta", None)
                    content = getattr(delta, "content", None)
                    if content:
                        text_parts.append(content)
                        self._dispatch(TEXT_DELTA, content)
                    refusal = getattr(delta, "refusal", None)
                    if refusal:
                        refusal_parts.append(refusal)
                        self._dispatch(REFUSAL_DELTA, refusal)
                    if getattr(choice, "finish_reason", None):
                        finish_reason = choice.finish_reason

            output_text = "".join(text_parts)
            response = FinalResponse(
                model=model,
                output_text=output_text,
                refusal="".join(refusal_parts) or None,
                output_parsed=None if refusal_parts else self._parse(output_text),
                finish_reason=finish_reason,
                usage=usage,
            )
        except asyncio.CancelledError:
            if not self._final.done():
                self._final.cancel()
            raise
        except Exception as e:
            logger.error("Streaming response failed: %s", e, extra={"model": self.model})
            self._dispatch(ERROR, e)
            if not self._final.done():
                self._final.set_exception(e)
            return

        if self._on_complete is not None:
            self._on_complete(response)
        if not self._final.done():
            self._final.set_result(response)


class LLMClient:
    """
    Client for interacting with LLMs via LiteLLM.

    Features:
    - Planning calls with forced tool choice
    - Streaming calls with structured output
    - File upload for PDF inputs
    - Token usage tracking
    """

    def __init__(self, config: LLMConfig | None = None):
        self.config = config or LLMConfig()
        self.total_tokens_used = 0
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0

        # Disable litellm logging noise
        litellm.suppress_debug_info = True

    @property
    def model(self) -> str:
        return self.config.model

    def _request_kwargs(
        self,
        conversation: Iterable[ConversationItem | dict],
        tools: list[ToolSpec] | None,
        tool_choice: str,
        model: str | None = None,
    ) -> dict[str, Any]:
        model = model or self.config.model
        kwargs: dict[str, Any] = {
            "model": get_litellm_model_name(model),
            "messages": to_chat_messages(conversation),
            "timeout": self.config.timeout,
        }

        # Reasoning models reject an explicit temperature
        if not is_reasoning_model(model):
            kwargs["temperature"] = self.config.temperature

        if self.config.max_tokens:
            kwargs["max_tokens"] = self.config.max_tokens

        if tools:
            kwargs["tools"] = [spec.to_openai() for spec in tools]
            kwargs["tool_choice"] = tool_choice

        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key

        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base

        return kwargs

    async def plan(
        self,
        conversation: Iterable[ConversationItem | dict],
        tools: list[ToolSpec],
        tool_choice: str = "required",
        model: str | None = None,
    ) -> list[ToolCall]:
        """
        Ask the model which tools to call.

        Args:
            conversation: The conversation so far
            tools: Tool specs declared to the model
            tool_choice: Forced to "required" for planning rounds
            model: Model to ask instead of the configured one

        Returns:
            The requested calls, with raw argument text, in emission order
        """
        kwargs = self._request_kwargs(conversation, tools, tool_choice, model)
        response = await acompletion(**kwargs)

        self._track_usage(_usage_dict(getattr(response, "usage", None)))

        message = response.choices[0].message
        calls = []
        for index, tc in enumerate(getattr(message, "tool_calls", None) or []):
            calls.append(ToolCall(
                call_id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments or "",
                index=index,
            ))

        logger.debug(
            "Planning returned %d tool call(s)", len(calls),
            extra={"model": model or self.config.model},
        )
        return calls

    def stream(
        self,
        conversation: Iterable[ConversationItem | dict],
        tools: list[ToolSpec] | None = None,
        schema: type[BaseModel] | None = None,
        schema_key: str = "data",
        model: str | None = None,
    ) -> ResponseStream:
        """
        Prepare a streaming request. Nothing is sent until the stream starts.

        Tools are declared with ``tool_choice="none"`` so the model can read
        earlier function-call history without calling again.
        """
        kwargs = self._request_kwargs(conversation, tools, "none", model)
        kwargs["stream"] = True
        kwargs["stream_options"] = {"include_usage": True}

        if schema is not None:
            kwargs["response_format"] = build_response_format(schema, schema_key)

        async def open_stream() -> AsyncIterator[Any]:
            return await acompletion(**kwargs)

        return ResponseStream(
            open_stream,
            model=model or self.config.model,
            response_model=schema,
            on_complete=lambda response: self._track_usage(response.usage),
        )

    async def upload_file(self, path: str | Path, purpose: str) -> str:
        """Upload a file through the provider's file API and return its ID."""
        kwargs: dict[str, Any] = {"purpose": purpose, "custom_llm_provider": "openai"}
        if self.config.api_key:
            kwargs["api_key"] = self.config.api_key
        if self.config.api_base:
            kwargs["api_base"] = self.config.api_base

        with open(path, "rb") as fh:
            created = await litellm.acreate_file(file=fh, **kwargs)

        logger.info("Uploaded %s as %s", Path(path).name, created.id)
        return created.id

    def _track_usage(self, usage: dict[str, int]) -> None:
        self.total_prompt_tokens += usage.get("prompt_tokens", 0)
        self.total_completion_tokens += usage.get("completion_tokens", 0)
        self.total_tokens_used += usage.get("total_tokens", 0)

    def get_usage_stats(self) -> dict[str, int]:
        """Get token usage statistics."""
        return {
            "total_tokens": self.total_tokens_used,
            "prompt_tokens": self.total_prompt_tokens,
            "completion_tokens": self.total_completion_tokens,
        }


def create_llm_client(
    model: str | None = None,
    api_key: str | None = None,
    temperature: float = 0.0,
    api_base: str | None = None,
    settings: LLMSettings | None = None,
) -> LLMClient:
    """
    Create an LLM client with common defaults.

    Args:
        model: Model ID (e.g., "gpt-4o", "o3-mini"). Defaults to ENZYMEML_MODEL.
        api_key: API key for the provider. Defaults to OPENAI_API_KEY.
        temperature: Temperature for non-reasoning models
        api_base: Base URL for the API
        settings: LLM settings to take defaults from

    Returns:
        Configured LLMClient instance
    """
    settings = settings or LLMSettings.from_env()
    config = LLMConfig(
        model=model or settings.model,
        temperature=temperature,
        api_key=api_key or settings.api_key,
        api_base=api_base or settings.api_base,
        timeout=settings.timeout,
    )
    return LLMClient(config)
