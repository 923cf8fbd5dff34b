"""
Built-in tools for enzymeml-llm.
"""

from .search_databases import (
    SEARCH_DATABASES_SPEC,
    SEARCH_DATABASES_TOOL,
    SUPPORTED_DATABASES,
    search_databases,
)

__all__ = [
    "SEARCH_DATABASES_SPEC",
    "SEARCH_DATABASES_TOOL",
    "SUPPORTED_DATABASES",
    "search_databases",
]
