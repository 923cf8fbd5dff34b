"""
Single-Tool Executor for enzymeml-llm

This module runs one ToolCall safely:
1. Parse the raw JSON arguments (failure is terminal)
2. Resolve the handler (unknown tools are terminal)
3. Invoke the handler under a timeout, retrying with backoff

Every path resolves to a well-formed ToolResult, so one failing tool can
never abort the batch it belongs to.
"""

import asyncio
import inspect
import json
import logging
import time
from typing import Any, Callable

from pydantic_core import to_jsonable_python

from ..config.settings import ToolChainSettings
from ..schemas.events import (
    ToolErrorEvent,
    ToolRetryEvent,
    ToolStartEvent,
    ToolSuccessEvent,
)
from ..schemas.tools import ToolCall, ToolErrorType, ToolResult, ToolSpec
from .backoff import BackoffPolicy
from .events import EventSink
from .tool_registry import ToolHandler, ToolRegistry


logger = logging.getLogger(__name__)


class InvalidArgumentsError(ValueError):
    """Raised when tool arguments cannot be used."""


def serialize_result(value: Any) -> str:
    """Serialize a handler result to compact JSON."""
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        default=to_jsonable_python,
    )


_SIZE_PROBES: tuple[tuple[Callable[[Any], bool], Callable[[Any], int]], ...] = (
    (lambda value: isinstance(value, str), len),
    (lambda value: isinstance(value, (list, tuple)), len),
    (lambda value: isinstance(value, (bytes, bytearray)), len),
    (lambda value: isinstance(value, memoryview), lambda value: value.nbytes),
)


def estimate_result_size(value: Any) -> int | None:
    """
    Best-effort size hint for a tool result.

    String length, then sequence length, then byte length, then the length
    of the serialized JSON. Returns None when nothing applies; never raises.
    """
    if value is None:
        return None
    for matches, measure in _SIZE_PROBES:
        if matches(value):
            return measure(value)
    try:
        return len(serialize_result(value))
    except (TypeError, ValueError, OverflowError):
        return None


def parse_arguments(call: ToolCall, spec: ToolSpec | None = None) -> dict[str, Any]:
    """
    Parse the raw argument text of a call into a dict.

    With a strict spec that forbids additional properties, unknown
    argument names are rejected as well.

    Raises:
        InvalidArgumentsError: If the text is not a JSON object
    """
    try:
        parsed = json.loads(call.arguments)
    # ValueError also covers over-long integer literals, RecursionError deep nesting
    except (ValueError, TypeError, RecursionError) as e:
        raise InvalidArgumentsError(f"Arguments are not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise InvalidArgumentsError(
            f"Arguments must be a JSON object, got {type(parsed).__name__}"
        )

    if spec is not None and spec.strict:
        schema = spec.parameters
        properties = schema.get("properties")
        if isinstance(properties, dict) and schema.get("additionalProperties") is False:
            unknown = sorted(set(parsed) - set(properties))
            if unknown:
                raise InvalidArgumentsError(f"Unknown arguments: {', '.join(unknown)}")

    return parsed


def _abort_signal_mode(handler: ToolHandler) -> str | None:
    """How the handler takes the abort signal: "positional", "keyword" or not at all."""
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        return None
    params = list(signature.parameters.values())
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return "positional"
    positional = [
        p for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) >= 2:
        return "positional"
    if "abort_signal" in signature.parameters:
        return "keyword"
    return None


class ToolExecutor:
    """
    Executes single tool calls with timeout, retry and lifecycle events.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        timeout: float = 30.0,
        retries: int = 2,
        backoff: BackoffPolicy | None = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        """
        Initialize the executor.

        Args:
            registry: Resolves tool names to handlers
            timeout: Wall-clock timeout per attempt, in seconds
            retries: Retries after the first attempt (total attempts = retries + 1)
            backoff: Delay strategy between attempts
            sleep: Awaitable sleep, injectable for tests
        """
        self.registry = registry
        self.timeout = timeout
        self.retries = retries
        self.backoff = backoff or BackoffPolicy()
        self._sleep = sleep

    @classmethod
    def from_settings(cls, registry: ToolRegistry, settings: ToolChainSettings) -> "ToolExecutor":
        return cls(
            registry,
            timeout=settings.tool_timeout_seconds,
            retries=settings.tool_retries,
            backoff=BackoffPolicy(
                base_delay=settings.backoff_base_seconds,
                factor=settings.backoff_factor,
                max_delay=settings.backoff_max_seconds,
            ),
        )

    async def execute(self, call: ToolCall, sink: EventSink) -> ToolResult:
        """Execute one call. Never raises except on task cancellation."""
        started = time.monotonic()
        sink.emit(ToolStartEvent, call_id=call.call_id, tool_name=call.name, index=call.index)

        handler = self.registry.resolve(call.name)

        try:
            arguments = parse_arguments(call, self.registry.get_spec(call.name))
        except InvalidArgumentsError as e:
            return self._fail(
                call, sink, ToolErrorType.INVALID_ARGUMENTS, str(e), started,
                raw_arguments=call.arguments,
            )

        if handler is None:
            return self._fail(
                call, sink, ToolErrorType.UNKNOWN_TOOL, f"Unknown tool: {call.name}", started,
            )

        last_error = ""
        error_type = ToolErrorType.EXECUTION_ERROR
        for attempt in range(self.retries + 1):
            try:
                value = await self._invoke(handler, arguments)
            except asyncio.CancelledError:
                raise
            except asyncio.TimeoutError:
                error_type = ToolErrorType.TIMEOUT
                last_error = f"Tool '{call.name}' timed out after {self.timeout}s"
            except Exception as e:
                error_type = ToolErrorType.EXECUTION_ERROR
                last_error = f"{type(e).__name__}: {e}"
            else:
                return self._succeed(call, sink, value, started, attempts=attempt + 1)

            if attempt < self.retries:
                delay = self.backoff.delay(attempt)
                logger.warning(
                    "Tool %s failed on attempt %d, retrying in %.2fs: %s",
                    call.name, attempt + 1, delay, last_error,
                    extra={"call_id": call.call_id, "tool_name": call.name, "attempt": attempt + 1},
                )
                sink.emit(
                    ToolRetryEvent,
                    call_id=call.call_id,
                    tool_name=call.name,
                    attempt=attempt + 2,
                    next_delay_ms=int(delay * 1000),
                    error=last_error,
                )
                await self._sleep(delay)

        return self._fail(
            call, sink, error_type, last_error, started,
            attempts=self.retries + 1,
        )

    async def _invoke(self, handler: ToolHandler, arguments: dict[str, Any]) -> Any:
        """Run the handler under the timeout; sync and async handlers alike."""
        abort_signal = asyncio.Event()
        mode = _abort_signal_mode(handler)

        async def run() -> Any:
            if mode == "positional":
                value = handler(arguments, abort_signal)
            elif mode == "keyword":
                value = handler(arguments, abort_signal=abort_signal)
            else:
                value = handler(arguments)
            if inspect.isawaitable(value):
                value = await value
            return value

        try:
            return await asyncio.wait_for(run(), timeout=self.timeout)
        except asyncio.TimeoutError:
            abort_signal.set()
            raise

    def _succeed(
        self,
        call: ToolCall,
        sink: EventSink,
        value: Any,
        started: float,
        attempts: int,
    ) -> ToolResult:
        try:
            output = serialize_result(value)
        except (TypeError, ValueError, OverflowError) as e:
            return self._fail(
                call, sink, ToolErrorType.EXECUTION_ERROR,
                f"Result is not JSON serializable: {e}", started, attempts=attempts,
            )

        duration_ms = int((time.monotonic() - started) * 1000)
        sink.emit(
            ToolSuccessEvent,
            call_id=call.call_id,
            tool_name=call.name,
            duration_ms=duration_ms,
            result_size=estimate_result_size(value),
            attempts=attempts,
        )
        logger.debug(
            "Tool %s succeeded in %dms",
            call.name, duration_ms,
            extra={"call_id": call.call_id, "tool_name": call.name, "duration_ms": duration_ms},
        )
        return ToolResult(
            call_id=call.call_id,
            name=call.name,
            output=output,
            success=True,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    def _fail(
        self,
        call: ToolCall,
        sink: EventSink,
        error_type: ToolErrorType,
        message: str,
        started: float,
        attempts: int = 0,
        **details: Any,
    ) -> ToolResult:
        duration_ms = int((time.monotonic() - started) * 1000)
        sink.emit(
            ToolErrorEvent,
            call_id=call.call_id,
            tool_name=call.name,
            error=message,
            error_type=error_type,
            attempts=attempts,
            duration_ms=duration_ms,
        )
        logger.warning(
            "Tool %s failed (%s): %s",
            call.name, error_type.value, message,
            extra={"call_id": call.call_id, "tool_name": call.name, "duration_ms": duration_ms},
        )
        return ToolResult.failure(
            call,
            error_type,
            message,
            attempts=attempts,
            duration_ms=duration_ms,
            **details,
        )
