"""
Model Provider Support for enzymeml-llm.

Known models and their providers:
- OpenAI (GPT-4o, GPT-4.1, GPT-5 and the o-series reasoning models)
- Anthropic (Claude)
- Ollama (local models)

Reasoning models reject an explicit temperature; ``is_reasoning_model``
decides whether the LLM client sends one.
"""

import os
from dataclasses import dataclass, field
from enum import Enum


class Provider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    OLLAMA = "ollama"


@dataclass
class ModelInfo:
    """Information about a model."""
    id: str
    name: str
    provider: Provider
    context_window: int
    supports_vision: bool = False
    supports_structured_output: bool = True
    reasoning: bool = False
    description: str = ""


@dataclass
class ProviderConfig:
    """Base configuration for a provider."""
    provider: Provider
    api_key: str | None = None
    api_base: str | None = None
    enabled: bool = True

    def is_configured(self) -> bool:
        """Check if the provider is properly configured."""
        return self.enabled and self.api_key is not None


@dataclass
class OpenAIConfig(ProviderConfig):
    """OpenAI-specific configuration."""
    provider: Provider = field(default=Provider.OPENAI, init=False)
    organization: str | None = None

    @classmethod
    def from_env(cls) -> "OpenAIConfig":
        """Load configuration from environment variables."""
        return cls(
            api_key=os.environ.get("OPENAI_API_KEY"),
            api_base=os.environ.get("OPENAI_API_BASE"),
            organization=os.environ.get("OPENAI_ORGANIZATION"),
            enabled=os.environ.get("OPENAI_ENABLED", "true").lower() == "true",
        )


@dataclass
class AnthropicConfig(ProviderConfig):
    """Anthropic-specific configuration."""
    provider: Provider = field(default=Provider.ANTHROPIC, init=False)

    @classmethod
    def from_env(cls) -> "AnthropicConfig":
        """Load configuration from environment variables."""
        return cls(
            api_key=os.environ.get("ANTHROPIC_API_KEY"),
            enabled=os.environ.get("ANTHROPIC_ENABLED", "true").lower() == "true",
        )


@dataclass
class OllamaConfig(ProviderConfig):
    """Ollama-specific configuration for local models."""
    provider: Provider = field(default=Provider.OLLAMA, init=False)
    api_key: str | None = field(default="ollama", init=False)

    @classmethod
    def from_env(cls) -> "OllamaConfig":
        """Load configuration from environment variables."""
        return cls(
            api_base=os.environ.get("OLLAMA_API_BASE", "http://localhost:11434"),
            enabled=os.environ.get("OLLAMA_ENABLED", "true").lower() == "true",
        )

    def is_configured(self) -> bool:
        """Ollama doesn't require an API key."""
        return self.enabled and self.api_base is not None


def _openai(model_id: str, name: str, context_window: int, reasoning: bool = False, description: str = "") -> ModelInfo:
    return ModelInfo(
        id=model_id,
        name=name,
        provider=Provider.OPENAI,
        context_window=context_window,
        supports_vision=True,
        reasoning=reasoning,
        description=description,
    )


OPENAI_MODELS = [
    _openai("gpt-4o", "GPT-4o", 128000, description="Multimodal GPT-4 model"),
    _openai("gpt-4o-mini", "GPT-4o Mini", 128000, description="Smaller, cheaper GPT-4o variant"),
    _openai("gpt-4.1", "GPT-4.1", 1047576, description="Long-context GPT-4.1"),
    _openai("gpt-4.1-mini", "GPT-4.1 Mini", 1047576),
    _openai("gpt-5", "GPT-5", 400000, reasoning=True, description="Reasoning model"),
    _openai("gpt-5-mini", "GPT-5 Mini", 400000, reasoning=True),
    _openai("gpt-5-nano", "GPT-5 Nano", 400000, reasoning=True),
    _openai("o1", "o1", 200000, reasoning=True),
    _openai("o1-mini", "o1 Mini", 128000, reasoning=True),
    _openai("o3", "o3", 200000, reasoning=True),
    _openai("o3-mini", "o3 Mini", 200000, reasoning=True),
    _openai("o4-mini", "o4 Mini", 200000, reasoning=True),
]

ANTHROPIC_MODELS = [
    ModelInfo(
        id="claude-3-5-sonnet-20241022",
        name="Claude 3.5 Sonnet",
        provider=Provider.ANTHROPIC,
        context_window=200000,
        supports_vision=True,
        description="Claude 3.5 Sonnet",
    ),
    ModelInfo(
        id="claude-3-5-haiku-20241022",
        name="Claude 3.5 Haiku",
        provider=Provider.ANTHROPIC,
        context_window=200000,
        supports_vision=True,
        description="Fast and cost-effective Claude model",
    ),
]

OLLAMA_MODELS = [
    ModelInfo(
        id="ollama/llama3.2",
        name="Llama 3.2",
        provider=Provider.OLLAMA,
        context_window=128000,
        supports_structured_output=False,
        description="Meta's Llama 3.2 (local)",
    ),
    ModelInfo(
        id="ollama/mistral",
        name="Mistral 7B",
        provider=Provider.OLLAMA,
        context_window=32768,
        supports_structured_output=False,
        description="Mistral 7B (local)",
    ),
]

# Bare names are matched after stripping a provider prefix such as "openai/"
REASONING_MODELS = frozenset(m.id for m in OPENAI_MODELS if m.reasoning)


class ModelRegistry:
    """
    Registry of known models across providers.

    Provides methods to:
    - Get model info by ID
    - Filter models by provider or capability
    - Check which providers are configured
    """

    def __init__(self):
        self._models: dict[str, ModelInfo] = {}
        self._providers: dict[Provider, ProviderConfig] = {}

        for model in OPENAI_MODELS + ANTHROPIC_MODELS + OLLAMA_MODELS:
            self._models[model.id] = model

    def configure_from_env(self) -> None:
        """Configure all providers from environment variables."""
        self._providers[Provider.OPENAI] = OpenAIConfig.from_env()
        self._providers[Provider.ANTHROPIC] = AnthropicConfig.from_env()
        self._providers[Provider.OLLAMA] = OllamaConfig.from_env()

    def get_model(self, model_id: str) -> ModelInfo | None:
        """Get model info by ID."""
        return self._models.get(model_id)

    def is_provider_configured(self, provider: Provider) -> bool:
        """Check if a provider is properly configured."""
        config = self._providers.get(provider)
        return config is not None and config.is_configured()

    def list_models(
        self,
        provider: Provider | None = None,
        reasoning: bool | None = None,
        only_configured: bool = False,
    ) -> list[ModelInfo]:
        """
        List known models with optional filtering.

        Args:
            provider: Filter by provider
            reasoning: Filter by the reasoning flag
            only_configured: Only return models from configured providers
        """
        models = list(self._models.values())

        if provider is not None:
            models = [m for m in models if m.provider == provider]

        if reasoning is not None:
            models = [m for m in models if m.reasoning == reasoning]

        if only_configured:
            models = [m for m in models if self.is_provider_configured(m.provider)]

        return models


_registry: ModelRegistry | None = None


def get_model_registry() -> ModelRegistry:
    """Get the global model registry instance."""
    global _registry
    if _registry is None:
        _registry = ModelRegistry()
        _registry.configure_from_env()
    return _registry


def _bare_name(model_id: str) -> str:
    return model_id.split("/", 1)[1] if "/" in model_id else model_id


def is_reasoning_model(model_id: str, registry: ModelRegistry | None = None) -> bool:
    """Check whether a model rejects an explicit temperature."""
    registry = registry or get_model_registry()
    model = registry.get_model(model_id)
    if model is not None:
        return model.reasoning
    return _bare_name(model_id) in REASONING_MODELS


def get_litellm_model_name(model_id: str, registry: ModelRegistry | None = None) -> str:
    """
    Convert a model ID to the format expected by LiteLLM.

    Args:
        model_id: The model ID (e.g., "gpt-4o", "claude-3-5-sonnet-20241022")
        registry: Optional model registry

    Returns:
        Model name in LiteLLM format
    """
    if registry is None:
        registry = get_model_registry()

    model = registry.get_model(model_id)
    if model is None:
        return model_id

    if model.provider == Provider.ANTHROPIC:
        return f"anthropic/{model_id}"

    return model_id
