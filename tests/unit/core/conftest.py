"""Shared fixtures for the tool-chain engine tests."""

import pytest

from enzymeml_llm.core.events import ChainContext, EventSink
from enzymeml_llm.schemas.tools import ToolCall


class ScriptedPlanner:
    """Planning client returning pre-scripted rounds of tool calls."""

    def __init__(self, *rounds):
        self.rounds = list(rounds)
        self.requests = []

    async def plan(self, conversation, tools, tool_choice="required", model=None):
        self.requests.append({
            "conversation": list(conversation),
            "tools": tools,
            "tool_choice": tool_choice,
            "model": model,
        })
        if self.rounds:
            return self.rounds.pop(0)
        return []


@pytest.fixture
def events():
    """List collecting every emitted chain event."""
    return []


@pytest.fixture
def sink(events):
    """Event sink recording into ``events``."""
    return EventSink(ChainContext(model="gpt-4o"), events.append)


@pytest.fixture
def make_call():
    """Factory for ToolCalls with sequential indexes."""
    counter = {"index": 0}

    def _make(name="lookup", arguments="{}", call_id=None):
        index = counter["index"]
        counter["index"] += 1
        return ToolCall(
            call_id=call_id or f"call_{index}",
            name=name,
            arguments=arguments,
            index=index,
        )

    return _make


@pytest.fixture
def planner_factory():
    return ScriptedPlanner
