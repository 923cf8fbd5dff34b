"""
Unit tests for the extract_data entry point.

The LLM client is replaced by a double whose planning call is scripted and
whose streaming call replays fake completion chunks.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pydantic import BaseModel

from enzymeml_llm.config.settings import Settings, ToolChainSettings
from enzymeml_llm.core.extraction import build_conversation, extract_data
from enzymeml_llm.core.llm_client import LLMClient, LLMConfig, ResponseStream
from enzymeml_llm.core.tool_registry import ToolDefinition
from enzymeml_llm.inputs import SystemQuery, UserQuery
from enzymeml_llm.schemas.conversation import FunctionCall, FunctionCallOutput, Message
from enzymeml_llm.schemas.events import ChainEventType
from enzymeml_llm.schemas.streaming import TextDelta
from enzymeml_llm.schemas.tools import ToolCall, ToolSpec


class Compound(BaseModel):
    name: str


def streaming_client(texts, plans=()):
    """Client double: scripted plan() rounds, stream() replaying text chunks."""
    async def generate():
        for text in texts:
            delta = SimpleNamespace(content=text, refusal=None)
            yield SimpleNamespace(model="gpt-4o", usage=None, choices=[
                SimpleNamespace(delta=delta, finish_reason=None),
            ])

    async def open_stream():
        return generate()

    client = MagicMock()
    client.plan = AsyncMock(side_effect=list(plans) or [[]])

    def stream(conversation, tools=None, schema=None, schema_key="data", model=None):
        client.stream_args = {
            "conversation": list(conversation), "tools": tools, "schema": schema, "model": model,
        }
        return ResponseStream(open_stream, model="gpt-4o", response_model=schema)

    client.stream = MagicMock(side_effect=stream)
    return client


@pytest.fixture
def settings():
    return Settings(tool_chain=ToolChainSettings(tool_retries=0, total_depth=1))


class TestBuildConversation:
    """Tests for build_conversation."""

    def test_inputs_and_raw_messages(self):
        """Test input objects and dicts become conversation messages."""
        conversation = build_conversation([
            SystemQuery("You extract enzyme data"),
            UserQuery("What is hexokinase?"),
            {"role": "assistant", "content": "Noted"},
        ])
        assert [m.role for m in conversation] == ["system", "user", "assistant"]
        assert all(isinstance(m, Message) for m in conversation)
        assert conversation[0].content == "You extract enzyme data"


class TestExtractData:
    """Tests for extract_data."""

    @pytest.mark.asyncio
    async def test_plain_text_without_tools(self, settings):
        """Test no planning happens when no tools are given."""
        client = streaming_client(["Hel", "lo"])

        result = await extract_data(
            "gpt-4o", [UserQuery("Say hello")], client=client, settings=settings,
        )
        items = await result.chunks.collect()
        final = await result.final

        client.plan.assert_not_awaited()
        assert items == [TextDelta(delta="Hel"), TextDelta(delta="lo")]
        assert final.output_text == "Hello"
        assert final.output_parsed is None
        assert client.stream_args["tools"] is None

    @pytest.mark.asyncio
    async def test_structured_output(self, settings):
        """Test the final response is parsed into the schema."""
        client = streaming_client(['{"name":', '"glucose"}'])

        result = await extract_data(
            "gpt-4o",
            [{"role": "user", "content": "Name a sugar"}],
            schema=Compound,
            client=client,
            settings=settings,
        )

        final = await result.final
        assert final.output_parsed == Compound(name="glucose")

    @pytest.mark.asyncio
    async def test_multiple_wraps_schema(self, settings):
        """Test multiple=True expects an items list."""
        client = streaming_client(['{"items":[{"name":"a"},{"name":"b"}]}'])

        result = await extract_data(
            "gpt-4o", [UserQuery("List")], schema=Compound, multiple=True,
            client=client, settings=settings,
        )

        final = await result.final
        assert [c.name for c in final.output_parsed.items] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_tool_round_before_streaming(self, settings):
        """Test tool results are in the conversation the final stream sees."""
        call = ToolCall(call_id="call_1", name="count_hits", arguments='{"q":"glucose"}')
        client = streaming_client(["done"], plans=[[call]])
        events = []

        async def count_hits(args):
            return {"hits": 3}

        tool = ToolDefinition(spec=ToolSpec(name="count_hits"), handler=count_hits)

        result = await extract_data(
            "gpt-4o",
            [UserQuery("How many?")],
            tools=[tool],
            client=client,
            observer=events.append,
            settings=settings,
            conversation_id="conv-42",
        )
        await result.final

        sent = client.stream_args["conversation"]
        assert isinstance(sent[1], FunctionCall)
        assert isinstance(sent[2], FunctionCallOutput)
        assert sent[2].output == '{"hits":3}'
        assert result.conversation == sent
        assert [spec.name for spec in client.stream_args["tools"]] == ["count_hits"]

        assert events[0].type == ChainEventType.CHAIN_START
        assert events[-1].type == ChainEventType.CHAIN_COMPLETE
        assert {e.metadata.conversation_id for e in events} == {"conv-42"}
        assert len({e.metadata.request_id for e in events}) == 1

    @pytest.mark.asyncio
    async def test_model_declining_tools(self, settings):
        """Test an empty plan streams from the original conversation."""
        client = streaming_client(["ok"], plans=[[]])
        tool = ToolDefinition(spec=ToolSpec(name="count_hits"), handler=lambda args: 0)

        result = await extract_data(
            "gpt-4o", [UserQuery("Hi")], tools=[tool], client=client, settings=settings,
        )
        await result.final

        client.plan.assert_awaited_once()
        assert len(client.stream_args["conversation"]) == 1

    @pytest.mark.asyncio
    async def test_planning_failure_raises(self, settings):
        """Test a planning failure surfaces from extract_data."""
        client = streaming_client([])
        client.plan = AsyncMock(side_effect=RuntimeError("auth failed"))
        tool = ToolDefinition(spec=ToolSpec(name="count_hits"), handler=lambda args: 0)

        with pytest.raises(RuntimeError, match="auth failed"):
            await extract_data(
                "gpt-4o", [UserQuery("Hi")], tools=[tool], client=client, settings=settings,
            )

        client.stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_requested_model_overrides_client_model(self, settings):
        """Test both requests go to the requested model, not the client's default."""
        async def chunks():
            delta = SimpleNamespace(content="ok", refusal=None)
            yield SimpleNamespace(model="o3-mini", usage=None, choices=[
                SimpleNamespace(delta=delta, finish_reason="stop"),
            ])

        planning = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None, tool_calls=None))],
            usage=None,
        )
        client = LLMClient(LLMConfig(model="gpt-4o"))
        tool = ToolDefinition(spec=ToolSpec(name="count_hits"), handler=lambda args: 0)
        events = []

        with patch("enzymeml_llm.core.llm_client.acompletion", new_callable=AsyncMock) as mock_acompletion:
            mock_acompletion.side_effect = [planning, chunks()]
            result = await extract_data(
                "o3-mini", [UserQuery("Hi")], tools=[tool], client=client,
                observer=events.append, settings=settings,
            )
            final = await result.final

        requests = [c.kwargs for c in mock_acompletion.call_args_list]
        assert [r["model"] for r in requests] == ["o3-mini", "o3-mini"]
        assert all("temperature" not in r for r in requests)
        assert {e.metadata.model for e in events} == {"o3-mini"}
        assert final.model == "o3-mini"
