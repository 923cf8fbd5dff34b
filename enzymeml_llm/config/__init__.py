"""
Configuration Module for enzymeml-llm

This module provides configuration management including:
- Environment variable loading
- Tool-chain policy (timeouts, retries, concurrency, rate limiting)
- Fetcher and logging options
"""

from .settings import (
    FetcherSettings,
    LLMSettings,
    LoggingSettings,
    Settings,
    ToolChainSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "FetcherSettings",
    "LLMSettings",
    "LoggingSettings",
    "Settings",
    "ToolChainSettings",
    "get_settings",
    "reload_settings",
]
