"""
Data extraction entry point for enzymeml-llm.

``extract_data`` prepares a conversation from the given inputs, optionally
runs a tool-chain round so the model can look things up in the databases,
then streams the final (optionally structured) answer.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable

from pydantic import BaseModel

from ..config.settings import Settings, get_settings
from ..inputs import BaseInput
from ..schemas.conversation import Conversation, as_conversation_item
from .events import ChainContext, ChainObserver, EventSink
from .llm_client import LLMClient, LLMConfig, ResponseStream, wrap_multiple
from .scheduler import ConcurrencyScheduler
from .streaming import StreamAggregator
from .tool_chain import ToolChain
from .tool_executor import ToolExecutor
from .tool_registry import ToolDefinition, ToolRegistry


logger = logging.getLogger(__name__)


@dataclass
class ExtractionStream:
    """
    The three views of one extraction.

    Attributes:
        stream: The underlying ResponseStream, for direct listener access
        chunks: Async iterator of StreamItems
        final: Future resolving to the FinalResponse
        conversation: The conversation that was sent, tool entries included
    """
    stream: ResponseStream
    chunks: StreamAggregator
    final: Any
    conversation: Conversation


def build_conversation(inputs: Iterable[BaseInput | dict | Any]) -> Conversation:
    """Convert inputs and raw messages into a fresh conversation."""
    conversation: Conversation = []
    for item in inputs:
        if isinstance(item, BaseInput):
            item = item.to_message()
        conversation.append(as_conversation_item(item))
    return conversation


async def extract_data(
    model: str,
    input: Iterable[BaseInput | dict | Any],
    *,
    schema: type[BaseModel] | None = None,
    multiple: bool = False,
    schema_key: str = "data",
    tools: Iterable[ToolDefinition] | None = None,
    client: LLMClient | None = None,
    observer: ChainObserver | None = None,
    settings: Settings | None = None,
    conversation_id: str | None = None,
) -> ExtractionStream:
    """
    Extract (structured) data with an optional tool-chain round first.

    Args:
        model: Model ID, e.g. "gpt-4o"
        input: Inputs (UserQuery, PDFUpload, ...) or raw role/content dicts
        schema: Pydantic model the final output must validate against
        multiple: Expect a list of ``schema`` objects, wrapped as ``{"items": [...]}``
        schema_key: Name the output schema is bound under
        tools: Tools the model may call before answering
        client: LLM client to use; one is created for ``model`` otherwise
        observer: Callback receiving every chain event
        settings: Settings to take tool-chain limits from
        conversation_id: Identifier stamped on every chain event

    Returns:
        ExtractionStream with ``stream``, ``chunks`` and ``final``

    Raises:
        Exception: Whatever the planning call raises; tool failures never raise
    """
    settings = settings or get_settings()
    if client is None:
        client = LLMClient(LLMConfig(
            model=model,
            api_key=settings.llm.api_key,
            api_base=settings.llm.api_base,
            timeout=settings.llm.timeout,
        ))

    conversation = build_conversation(input)

    output_schema = schema
    if multiple and schema is not None:
        output_schema = wrap_multiple(schema)

    definitions = list(tools or [])
    specs = None
    if definitions:
        chain_settings = settings.tool_chain
        registry = ToolRegistry(definitions)
        sink = EventSink(
            ChainContext(
                model=model,
                total_depth=chain_settings.total_depth,
                conversation_id=conversation_id,
                request_id=uuid.uuid4().hex[:12],
            ),
            observer,
        )
        chain = ToolChain(
            client=client,
            registry=registry,
            executor=ToolExecutor.from_settings(registry, chain_settings),
            scheduler=ConcurrencyScheduler.from_settings(chain_settings),
            sink=sink,
        )
        await chain.run(conversation, depth=1, total_depth=chain_settings.total_depth)
        specs = registry.specs()

    logger.info(
        "Streaming extraction with %d conversation item(s)", len(conversation),
        extra={"model": model},
    )
    stream = client.stream(
        conversation, tools=specs, schema=output_schema, schema_key=schema_key, model=model,
    )
    chunks = StreamAggregator(stream)
    return ExtractionStream(
        stream=stream,
        chunks=chunks,
        final=chunks.final,
        conversation=conversation,
    )
