"""
enzymeml-llm: LLM-assisted extraction of enzymology data

Streams structured EnzymeML data out of text, PDFs and images, optionally
letting the model search ChEBI, PDB, PubChem and UniProt first.

Core Components:
- schemas: Pydantic schemas for tools, chain events, stream items and entities
- core: Tool registry, executor, scheduler, tool chain and streaming
- fetchers: Async database clients
- tools: The built-in search_databases tool
- inputs: Text, image and PDF inputs

Usage:
    from enzymeml_llm import extract_data, UserQuery, PDFUpload
    from enzymeml_llm.tools import SEARCH_DATABASES_TOOL
"""

__version__ = "0.1.0"

from .errors import (
    EnzymeMLError,
    FetcherError,
    UnsupportedFileTypeError,
    UploadRequiredError,
    ToolRegistrationError,
)

from .schemas import (
    ToolSpec,
    ToolCall,
    ToolResult,
    ToolErrorType,
    ChainEvent,
    ChainEventType,
    ChainMetadata,
    StreamItem,
    FinalResponse,
    Message,
    FunctionCall,
    FunctionCallOutput,
    SmallMolecule,
    Protein,
    Reaction,
)

from .core import (
    ToolDefinition,
    ToolRegistry,
    ToolExecutor,
    ConcurrencyScheduler,
    RateLimit,
    ToolChain,
    LLMClient,
    LLMConfig,
    StreamAggregator,
    ExtractionStream,
    extract_data,
    create_llm_client,
)

from .inputs import (
    BaseInput,
    UserQuery,
    SystemQuery,
    ImageUpload,
    PDFUpload,
    upload_file,
)

__all__ = [
    "__version__",
    # Errors
    "EnzymeMLError",
    "FetcherError",
    "UnsupportedFileTypeError",
    "UploadRequiredError",
    "ToolRegistrationError",
    # Schemas
    "ToolSpec",
    "ToolCall",
    "ToolResult",
    "ToolErrorType",
    "ChainEvent",
    "ChainEventType",
    "ChainMetadata",
    "StreamItem",
    "FinalResponse",
    "Message",
    "FunctionCall",
    "FunctionCallOutput",
    "SmallMolecule",
    "Protein",
    "Reaction",
    # Core
    "ToolDefinition",
    "ToolRegistry",
    "ToolExecutor",
    "ConcurrencyScheduler",
    "RateLimit",
    "ToolChain",
    "LLMClient",
    "LLMConfig",
    "StreamAggregator",
    "ExtractionStream",
    "extract_data",
    "create_llm_client",
    # Inputs
    "BaseInput",
    "UserQuery",
    "SystemQuery",
    "ImageUpload",
    "PDFUpload",
    "upload_file",
]
