"""
Settings Configuration for enzymeml-llm

This module provides centralized settings management with:
- Environment variable loading
- Default values
- Validation
"""

import os
from dataclasses import dataclass, field
from typing import Any


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


def _env_optional_int(name: str) -> int | None:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class LLMSettings:
    """LLM-related settings."""

    model: str = "gpt-4o"
    api_key: str | None = None
    api_base: str | None = None
    timeout: int = 120

    @classmethod
    def from_env(cls) -> "LLMSettings":
        """Load LLM settings from environment variables."""
        return cls(
            model=os.environ.get("ENZYMEML_MODEL", "gpt-4o"),
            api_key=os.environ.get("OPENAI_API_KEY"),
            api_base=os.environ.get("ENZYMEML_API_BASE"),
            timeout=int(os.environ.get("ENZYMEML_LLM_TIMEOUT", "120")),
        )

    def has_valid_api_key(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)


@dataclass
class ToolChainSettings:
    """Tool execution settings: timeouts, retries, concurrency and backoff."""

    tool_timeout_seconds: float = 30.0
    tool_retries: int = 2
    max_concurrency: int = 2
    rate_limit_max_tasks: int | None = None
    rate_limit_interval_seconds: float = 1.0
    rate_limit_carry_over: bool = False
    backoff_base_seconds: float = 0.5
    backoff_factor: float = 2.0
    backoff_max_seconds: float = 8.0
    total_depth: int = 1

    @classmethod
    def from_env(cls) -> "ToolChainSettings":
        """Load tool-chain settings from environment variables."""
        return cls(
            tool_timeout_seconds=float(os.environ.get("ENZYMEML_TOOL_TIMEOUT", "30")),
            tool_retries=int(os.environ.get("ENZYMEML_TOOL_RETRIES", "2")),
            max_concurrency=int(os.environ.get("ENZYMEML_MAX_CONCURRENCY", "2")),
            rate_limit_max_tasks=_env_optional_int("ENZYMEML_RATE_LIMIT_MAX_TASKS"),
            rate_limit_interval_seconds=float(
                os.environ.get("ENZYMEML_RATE_LIMIT_INTERVAL", "1.0")
            ),
            rate_limit_carry_over=_env_bool("ENZYMEML_RATE_LIMIT_CARRY_OVER"),
            backoff_base_seconds=float(os.environ.get("ENZYMEML_BACKOFF_BASE", "0.5")),
            backoff_factor=float(os.environ.get("ENZYMEML_BACKOFF_FACTOR", "2.0")),
            backoff_max_seconds=float(os.environ.get("ENZYMEML_BACKOFF_MAX", "8.0")),
            total_depth=int(os.environ.get("ENZYMEML_CHAIN_DEPTH", "1")),
        )

    @property
    def rate_limited(self) -> bool:
        return self.rate_limit_max_tasks is not None


@dataclass
class FetcherSettings:
    """Settings for the database fetchers."""

    http_timeout: float = 30.0
    search_limit: int = 5
    user_agent: str = "enzymeml-llm/0.1"

    @classmethod
    def from_env(cls) -> "FetcherSettings":
        """Load fetcher settings from environment variables."""
        return cls(
            http_timeout=float(os.environ.get("ENZYMEML_HTTP_TIMEOUT", "30")),
            search_limit=int(os.environ.get("ENZYMEML_SEARCH_LIMIT", "5")),
            user_agent=os.environ.get("ENZYMEML_USER_AGENT", "enzymeml-llm/0.1"),
        )


@dataclass
class LoggingSettings:
    """Logging settings."""

    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """Load logging settings from environment variables."""
        return cls(
            log_level=os.environ.get("ENZYMEML_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("ENZYMEML_LOG_FORMAT", "text").lower(),
        )


@dataclass
class Settings:
    """
    Centralized settings for enzymeml-llm.

    Combines all setting categories and provides validation.
    """

    llm: LLMSettings = field(default_factory=LLMSettings)
    tool_chain: ToolChainSettings = field(default_factory=ToolChainSettings)
    fetchers: FetcherSettings = field(default_factory=FetcherSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load all settings from environment variables."""
        return cls(
            llm=LLMSettings.from_env(),
            tool_chain=ToolChainSettings.from_env(),
            fetchers=FetcherSettings.from_env(),
            logging=LoggingSettings.from_env(),
        )

    def validate(self) -> list[str]:
        """
        Validate settings and return list of errors.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        chain = self.tool_chain
        if chain.tool_timeout_seconds <= 0:
            errors.append("ENZYMEML_TOOL_TIMEOUT must be positive.")

        if chain.tool_retries < 0:
            errors.append("ENZYMEML_TOOL_RETRIES must be non-negative.")

        if chain.max_concurrency < 1:
            errors.append("ENZYMEML_MAX_CONCURRENCY must be at least 1.")

        if chain.rate_limit_max_tasks is not None and chain.rate_limit_max_tasks < 1:
            errors.append("ENZYMEML_RATE_LIMIT_MAX_TASKS must be at least 1 when set.")

        if chain.rate_limit_interval_seconds <= 0:
            errors.append("ENZYMEML_RATE_LIMIT_INTERVAL must be positive.")

        if chain.backoff_factor < 1:
            errors.append("ENZYMEML_BACKOFF_FACTOR must be at least 1.")

        if chain.total_depth < 1:
            errors.append("ENZYMEML_CHAIN_DEPTH must be at least 1.")

        if self.fetchers.search_limit < 1:
            errors.append("ENZYMEML_SEARCH_LIMIT must be at least 1.")

        if self.logging.log_format not in ("text", "json"):
            errors.append("ENZYMEML_LOG_FORMAT must be 'text' or 'json'.")

        return errors

    def is_valid(self) -> bool:
        """Check if settings are valid."""
        return len(self.validate()) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for logging."""
        return {
            "llm": {
                "model": self.llm.model,
                "api_base": self.llm.api_base,
                "timeout": self.llm.timeout,
                "has_api_key": self.llm.has_valid_api_key(),
            },
            "tool_chain": {
                "tool_timeout_seconds": self.tool_chain.tool_timeout_seconds,
                "tool_retries": self.tool_chain.tool_retries,
                "max_concurrency": self.tool_chain.max_concurrency,
                "rate_limit_max_tasks": self.tool_chain.rate_limit_max_tasks,
                "rate_limit_interval_seconds": self.tool_chain.rate_limit_interval_seconds,
                "rate_limit_carry_over": self.tool_chain.rate_limit_carry_over,
                "total_depth": self.tool_chain.total_depth,
            },
            "fetchers": {
                "http_timeout": self.fetchers.http_timeout,
                "search_limit": self.fetchers.search_limit,
            },
            "logging": {
                "log_level": self.logging.log_level,
                "log_format": self.logging.log_format,
            },
        }


# Global settings instance (lazy loaded)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Settings are loaded from environment variables on first access.
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reload_settings() -> Settings:
    """Reload settings from environment variables."""
    global _settings
    _settings = Settings.from_env()
    return _settings
