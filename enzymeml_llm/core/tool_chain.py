"""
Tool-Chain Orchestrator for enzymeml-llm

One chain round:
1. Ask the model to plan tool calls (tool choice forced to "required")
2. Record the calls in the conversation
3. Execute them concurrently
4. Record every result in the conversation

Rounds repeat while the depth budget allows and the model keeps asking
for tools. The conversation passed in is mutated in place and returned.
"""

import logging
from dataclasses import replace
from typing import Protocol

from ..schemas.conversation import Conversation, FunctionCall, FunctionCallOutput
from ..schemas.events import (
    ChainCompleteEvent,
    ChainStartEvent,
    NoToolsEvent,
    OutputsAppendedEvent,
    PlanningResultEvent,
)
from ..schemas.tools import ToolCall, ToolSpec
from .events import EventSink
from .scheduler import ConcurrencyScheduler
from .tool_executor import ToolExecutor
from .tool_registry import ToolRegistry


logger = logging.getLogger(__name__)


class PlanningClient(Protocol):
    """The part of the LLM client the chain needs."""

    async def plan(
        self,
        conversation: Conversation,
        tools: list[ToolSpec],
        tool_choice: str = "required",
        model: str | None = None,
    ) -> list[ToolCall]:
        ...


class ToolChain:
    """
    Runs planning and tool execution rounds over a conversation.

    Tool failures never escape: they come back as error outputs the model
    can read. Only a failing planning call raises.
    """

    def __init__(
        self,
        client: PlanningClient,
        registry: ToolRegistry,
        executor: ToolExecutor,
        scheduler: ConcurrencyScheduler,
        sink: EventSink,
    ):
        self.client = client
        self.registry = registry
        self.executor = executor
        self.scheduler = scheduler
        self.sink = sink

    async def run(
        self,
        conversation: Conversation,
        *,
        depth: int = 1,
        total_depth: int = 1,
    ) -> Conversation:
        """
        Run chain rounds until the model stops calling tools or the depth
        budget is spent.

        Args:
            conversation: Conversation to extend; mutated in place
            depth: 1-based depth of the first round
            total_depth: Last depth allowed to run

        Returns:
            The same conversation object
        """
        sink = self.sink.with_context(
            replace(self.sink.context, depth=depth, total_depth=total_depth)
        )
        sink.emit(ChainStartEvent, input_size=len(conversation))

        specs = self.registry.specs()
        while depth <= total_depth:
            calls = await self.client.plan(
                conversation, specs, tool_choice="required", model=sink.context.model,
            )

            if not calls:
                logger.info("Model requested no tools at depth %d", depth)
                sink.emit(NoToolsEvent)
                break

            sink.emit(
                PlanningResultEvent,
                count=len(calls),
                tool_names=[call.name for call in calls],
                call_ids=[call.call_id for call in calls],
            )
            conversation.extend(FunctionCall.from_call(call) for call in calls)

            batch = await self.scheduler.run(
                calls, lambda call: self.executor.execute(call, sink)
            )
            conversation.extend(FunctionCallOutput.from_result(result) for result in batch.results)

            sink.emit(OutputsAppendedEvent, count=batch.count, duration_ms=batch.total_duration_ms)
            logger.info(
                "Executed %d tool call(s) at depth %d, %d failed",
                batch.count, depth, len(batch.failed_results),
                extra={"duration_ms": batch.total_duration_ms},
            )

            depth += 1
            if depth <= total_depth:
                sink = sink.with_context(sink.context.at_depth(depth))

        sink.emit(ChainCompleteEvent, conversation_length=len(conversation))
        return conversation
