"""
enzymeml-llm Core

This package contains the tool-chain engine and the model transport:
- tool_registry: Tool definitions and name resolution
- tool_executor: Single-call execution with timeout and retry
- scheduler: Concurrent batch execution with rate limiting
- tool_chain: Planning and execution rounds over a conversation
- llm_client: LLM client wrapper using LiteLLM
- streaming: Pull-based aggregation of streamed responses
- extraction: The extract_data entry point
"""

from .backoff import BackoffPolicy

from .events import (
    ChainContext,
    ChainObserver,
    EventSink,
)

from .tool_registry import (
    DEFAULT_TOOL_NAME,
    ToolDefinition,
    ToolHandler,
    ToolRegistry,
)

from .tool_executor import (
    ToolExecutor,
    estimate_result_size,
    parse_arguments,
    serialize_result,
)

from .scheduler import (
    BatchResult,
    ConcurrencyScheduler,
    RateLimit,
)

from .tool_chain import ToolChain

from .providers import (
    ModelInfo,
    ModelRegistry,
    Provider,
    get_model_registry,
    is_reasoning_model,
)

from .llm_client import (
    LLMClient,
    LLMConfig,
    ResponseStream,
    create_llm_client,
)

from .streaming import StreamAggregator

from .extraction import (
    ExtractionStream,
    build_conversation,
    extract_data,
)

__all__ = [
    "BackoffPolicy",
    "ChainContext",
    "ChainObserver",
    "EventSink",
    "DEFAULT_TOOL_NAME",
    "ToolDefinition",
    "ToolHandler",
    "ToolRegistry",
    "ToolExecutor",
    "estimate_result_size",
    "parse_arguments",
    "serialize_result",
    "BatchResult",
    "ConcurrencyScheduler",
    "RateLimit",
    "ToolChain",
    "ModelInfo",
    "ModelRegistry",
    "Provider",
    "get_model_registry",
    "is_reasoning_model",
    "LLMClient",
    "LLMConfig",
    "ResponseStream",
    "create_llm_client",
    "StreamAggregator",
    "ExtractionStream",
    "build_conversation",
    "extract_data",
]
