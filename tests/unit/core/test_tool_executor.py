"""
Unit tests for the single-tool executor.

Tests cover:
- Successful sync and async handlers
- Timeouts and the abort signal
- Retries with backoff and the retry event sequence
- Terminal failures (bad arguments, unknown tool)
- Result serialization and size estimation
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel

from enzymeml_llm.core.backoff import BackoffPolicy
from enzymeml_llm.core.tool_executor import (
    InvalidArgumentsError,
    ToolExecutor,
    estimate_result_size,
    parse_arguments,
    serialize_result,
)
from enzymeml_llm.core.tool_registry import ToolDefinition, ToolRegistry
from enzymeml_llm.schemas.events import ChainEventType
from enzymeml_llm.schemas.tools import ToolCall, ToolErrorType, ToolSpec


def registry_with(handler, name="lookup", parameters=None, strict=False):
    spec = ToolSpec(
        name=name,
        parameters=parameters or {"type": "object", "properties": {}},
        strict=strict,
    )
    return ToolRegistry([ToolDefinition(spec=spec, handler=handler)], include_default=False)


def event_types(events):
    return [event.type for event in events]


class TestSuccessfulExecution:
    """Tests for calls that succeed."""

    @pytest.mark.asyncio
    async def test_async_handler(self, sink, events, make_call):
        """Test an async handler result is serialized compactly."""
        async def handler(args):
            return {"hits": args["n"]}

        executor = ToolExecutor(registry_with(handler))
        result = await executor.execute(make_call(arguments='{"n": 3}'), sink)

        assert result.success is True
        assert result.output == '{"hits":3}'
        assert result.attempts == 1
        assert event_types(events) == [ChainEventType.TOOL_START, ChainEventType.TOOL_SUCCESS]
        assert events[1].result_size == 10

    @pytest.mark.asyncio
    async def test_sync_handler(self, sink, make_call):
        """Test plain functions are accepted as handlers."""
        executor = ToolExecutor(registry_with(lambda args: ["a", "b"]))
        result = await executor.execute(make_call(), sink)

        assert result.success is True
        assert json.loads(result.output) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_pydantic_result_is_serialized(self, sink, make_call):
        """Test model instances are serialized through pydantic."""
        class Hit(BaseModel):
            id: str

        executor = ToolExecutor(registry_with(lambda args: [Hit(id="x")]))
        result = await executor.execute(make_call(), sink)

        assert result.output == '[{"id":"x"}]'

    @pytest.mark.asyncio
    async def test_unserializable_result_is_execution_error(self, sink, make_call):
        """Test a result that cannot be serialized becomes an error result."""
        executor = ToolExecutor(registry_with(lambda args: object()))
        result = await executor.execute(make_call(), sink)

        assert result.success is False
        assert result.error_type == ToolErrorType.EXECUTION_ERROR


class TestTimeouts:
    """Tests for per-attempt timeouts."""

    @pytest.mark.asyncio
    async def test_hanging_handler_times_out(self, sink, events, make_call):
        """Test a handler exceeding the timeout yields a timeout result."""
        async def handler(args):
            await asyncio.sleep(10)

        executor = ToolExecutor(registry_with(handler), timeout=0.05, retries=0)
        result = await executor.execute(make_call(), sink)

        assert result.success is False
        assert result.error_type == ToolErrorType.TIMEOUT
        payload = result.payload()
        assert payload["error_type"] == "timeout"
        assert "timed out" in payload["error"]
        assert event_types(events) == [ChainEventType.TOOL_START, ChainEventType.TOOL_ERROR]

    @pytest.mark.asyncio
    async def test_abort_signal_is_set_on_timeout(self, sink, make_call):
        """Test handlers taking a second argument see the abort signal fire."""
        seen = []

        async def handler(args, abort_signal):
            seen.append(abort_signal)
            await asyncio.sleep(10)

        executor = ToolExecutor(registry_with(handler), timeout=0.05, retries=0)
        await executor.execute(make_call(), sink)

        assert len(seen) == 1
        assert seen[0].is_set()

    @pytest.mark.asyncio
    async def test_abort_signal_keyword(self, sink, make_call):
        """Test a keyword-only abort_signal parameter receives the signal."""
        seen = []

        def handler(args, *, abort_signal=None):
            seen.append(abort_signal)
            return "ok"

        executor = ToolExecutor(registry_with(handler))
        result = await executor.execute(make_call(), sink)

        assert result.success is True
        assert len(seen) == 1
        assert isinstance(seen[0], asyncio.Event)
        assert not seen[0].is_set()


class TestRetries:
    """Tests for retry behavior."""

    @pytest.mark.asyncio
    async def test_always_failing_handler(self, sink, events, make_call):
        """Test retries + 1 attempts, with backoff sleeps between them."""
        calls = []

        def handler(args):
            calls.append(args)
            raise RuntimeError("boom")

        sleep = AsyncMock()
        executor = ToolExecutor(
            registry_with(handler),
            retries=2,
            backoff=BackoffPolicy.no_jitter(base_delay=0.5, factor=2.0),
            sleep=sleep,
        )
        result = await executor.execute(make_call(), sink)

        assert len(calls) == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]
        assert result.success is False
        assert result.error_type == ToolErrorType.EXECUTION_ERROR
        assert result.attempts == 3
        assert result.payload()["attempts"] == 3
        assert "RuntimeError: boom" in result.payload()["error"]

        assert event_types(events) == [
            ChainEventType.TOOL_START,
            ChainEventType.TOOL_RETRY,
            ChainEventType.TOOL_RETRY,
            ChainEventType.TOOL_ERROR,
        ]
        assert [e.attempt for e in events if e.type == ChainEventType.TOOL_RETRY] == [2, 3]
        assert events[1].next_delay_ms == 500

    @pytest.mark.asyncio
    async def test_succeeds_after_retry(self, sink, events, make_call):
        """Test a transient failure followed by success."""
        attempts = {"n": 0}

        def handler(args):
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise ConnectionError("flaky")
            return "ok"

        executor = ToolExecutor(registry_with(handler), sleep=AsyncMock())
        result = await executor.execute(make_call(), sink)

        assert result.success is True
        assert result.attempts == 2
        assert result.output == '"ok"'
        assert events[-1].type == ChainEventType.TOOL_SUCCESS
        assert events[-1].attempts == 2

    @pytest.mark.asyncio
    async def test_zero_retries(self, sink, make_call):
        """Test retries=0 means exactly one attempt."""
        handler = AsyncMock(side_effect=ValueError("nope"))
        sleep = AsyncMock()
        executor = ToolExecutor(registry_with(handler), retries=0, sleep=sleep)

        result = await executor.execute(make_call(), sink)

        assert handler.await_count == 1
        sleep.assert_not_awaited()
        assert result.attempts == 1


class TestTerminalFailures:
    """Tests for failures that are never retried."""

    @pytest.mark.asyncio
    async def test_malformed_arguments(self, sink, events, make_call):
        """Test invalid JSON arguments fail without invoking the handler."""
        handler = AsyncMock()
        executor = ToolExecutor(registry_with(handler))

        result = await executor.execute(make_call(arguments="{not json"), sink)

        handler.assert_not_awaited()
        assert result.error_type == ToolErrorType.INVALID_ARGUMENTS
        assert result.payload()["raw_arguments"] == "{not json"
        assert event_types(events) == [ChainEventType.TOOL_START, ChainEventType.TOOL_ERROR]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, sink, make_call):
        """Test an unregistered name yields an unknown_tool result."""
        executor = ToolExecutor(ToolRegistry(include_default=False))
        result = await executor.execute(make_call(name="missing"), sink)

        assert result.success is False
        assert result.error_type == ToolErrorType.UNKNOWN_TOOL
        assert result.payload()["tool"] == "missing"

    @pytest.mark.asyncio
    async def test_strict_schema_rejects_unknown_arguments(self, sink, make_call):
        """Test undeclared argument names are rejected under a strict schema."""
        parameters = {
            "type": "object",
            "properties": {"query": {"type": "string"}},
            "required": ["query"],
            "additionalProperties": False,
        }
        executor = ToolExecutor(registry_with(AsyncMock(), parameters=parameters, strict=True))

        result = await executor.execute(make_call(arguments='{"query": "a", "extra": 1}'), sink)

        assert result.error_type == ToolErrorType.INVALID_ARGUMENTS
        assert "extra" in result.payload()["error"]


class TestParseArguments:
    """Tests for parse_arguments."""

    def test_object(self):
        call = ToolCall(call_id="c", name="t", arguments='{"a": 1}')
        assert parse_arguments(call) == {"a": 1}

    def test_non_object_rejected(self):
        call = ToolCall(call_id="c", name="t", arguments="[1, 2]")
        with pytest.raises(InvalidArgumentsError):
            parse_arguments(call)

    def test_empty_string_rejected(self):
        call = ToolCall(call_id="c", name="t", arguments="")
        with pytest.raises(InvalidArgumentsError):
            parse_arguments(call)

    @pytest.mark.parametrize(
        "arguments",
        [
            '{"n": ' + "9" * 5000 + "}",
            '{"n": ' + "[" * 100000 + "]" * 100000 + "}",
        ],
        ids=["huge-integer", "deep-nesting"],
    )
    def test_unparseable_json_rejected(self, arguments):
        """Test parser failures beyond JSONDecodeError become invalid arguments."""
        call = ToolCall(call_id="c", name="t", arguments=arguments)
        with pytest.raises(InvalidArgumentsError):
            parse_arguments(call)

    @pytest.mark.asyncio
    async def test_huge_integer_yields_error_result(self, sink, events, make_call):
        """Test execute returns an error result instead of raising."""
        executor = ToolExecutor(registry_with(lambda args: args), retries=0)

        result = await executor.execute(make_call(arguments='{"n": ' + "9" * 5000 + "}"), sink)

        assert not result.success
        assert result.error_type == ToolErrorType.INVALID_ARGUMENTS
        assert event_types(events)[-1] == ChainEventType.TOOL_ERROR

    def test_non_strict_spec_allows_extra(self):
        spec = ToolSpec(
            name="t",
            parameters={"type": "object", "properties": {}, "additionalProperties": False},
            strict=False,
        )
        call = ToolCall(call_id="c", name="t", arguments='{"x": 1}')
        assert parse_arguments(call, spec) == {"x": 1}


class TestResultHelpers:
    """Tests for serialization and size estimation."""

    def test_serialize_keeps_unicode(self):
        assert serialize_result({"name": "α-D-glucose"}) == '{"name":"α-D-glucose"}'

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, None),
            ("hello", 5),
            ([1, 2, 3], 3),
            ((1,), 1),
            (b"abcd", 4),
            (memoryview(b"ab"), 2),
            ({"hits": 3}, 10),
            (object(), None),
        ],
    )
    def test_estimate_result_size(self, value, expected):
        assert estimate_result_size(value) == expected
