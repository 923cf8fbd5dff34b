"""
The built-in ``search_databases`` tool.

Lets the model look up small molecules and proteins mentioned in a
document in ChEBI, PDB, PubChem and UniProt.
"""

import logging
from typing import Any, Awaitable, Callable

import httpx

from ..config.settings import FetcherSettings
from ..core.tool_registry import DEFAULT_TOOL_NAME, ToolDefinition
from ..fetchers.base import create_http_client
from ..fetchers.chebi import ChEBIClient
from ..fetchers.pdb import PDBClient
from ..fetchers.pubchem import PubChemClient
from ..fetchers.uniprot import UniProtClient
from ..schemas.tools import ToolSpec


logger = logging.getLogger(__name__)

SUPPORTED_DATABASES = ("chebi", "pdb", "pubchem", "uniprot")

SEARCH_DATABASES_SPEC = ToolSpec(
    name=DEFAULT_TOOL_NAME,
    description=(
        "Search for specific molecular and protein information that is mentioned in the "
        "provided document. Supports ChEBI (small molecules), PDB (protein structures), "
        "PubChem (chemical database), and UniProt (protein sequences)."
    ),
    parameters={
        "type": "object",
        "properties": {
            "databases": {
                "type": "array",
                "items": {"type": "string", "enum": list(SUPPORTED_DATABASES)},
                "description": "The databases to search in.",
            },
            "query": {
                "type": "string",
                "description": "The molecule, protein or entity to search for.",
            },
        },
        "required": ["databases", "query"],
        "additionalProperties": False,
    },
    strict=True,
)

_SEARCHERS: dict[str, Callable[..., Any]] = {
    "chebi": ChEBIClient,
    "pdb": PDBClient,
    "pubchem": PubChemClient,
    "uniprot": UniProtClient,
}


async def search_databases(
    databases: list[str],
    query: str,
    limit: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[dict[str, Any]]:
    """
    Search each database in turn and concatenate the hits.

    Args:
        databases: Any of "chebi", "pdb", "pubchem", "uniprot"
        query: Search term
        limit: Hits per database (defaults to ENZYMEML_SEARCH_LIMIT)
        client: Shared HTTP client; one is created otherwise

    Raises:
        ValueError: If a database is not supported
    """
    unsupported = [db for db in databases if db not in _SEARCHERS]
    if unsupported:
        raise ValueError(f"Database {unsupported[0]} not supported")

    settings = FetcherSettings.from_env()
    limit = limit or settings.search_limit
    owns_client = client is None
    client = client or create_http_client(settings)

    results: list[dict[str, Any]] = []
    try:
        for database in databases:
            fetcher = _SEARCHERS[database](client, settings)
            hits = await fetcher.search(query, limit)
            logger.info(
                "Found %d hit(s) for %r", len(hits), query,
                extra={"database": database},
            )
            results.extend(hit.model_dump() for hit in hits[:limit])
    finally:
        if owns_client:
            await client.aclose()

    return results


def _handle(arguments: dict[str, Any]) -> Awaitable[list[dict[str, Any]]]:
    return search_databases(arguments["databases"], arguments["query"])


SEARCH_DATABASES_TOOL = ToolDefinition(spec=SEARCH_DATABASES_SPEC, handler=_handle)
