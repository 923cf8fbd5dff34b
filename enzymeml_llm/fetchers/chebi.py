"""
ChEBI fetcher.

Looks up chemical entities in the ChEBI public backend API and maps them
to SmallMolecule objects.
"""

import logging
from typing import Any

import httpx

from ..errors import ChEBIError
from ..schemas.entities import SmallMolecule
from .base import BaseFetcher, process_id


logger = logging.getLogger(__name__)

COMPOUNDS_URL = "https://www.ebi.ac.uk/chebi/backend/api/public/compounds/"
SEARCH_URL = "https://www.ebi.ac.uk/chebi/backend/api/public/es_search/"
ENTRY_PAGE_URL = "https://www.ebi.ac.uk/chebi/searchId.do?chebiId={}"


def process_chebi_entry(entry: dict[str, Any]) -> SmallMolecule:
    """Map one entry of the compounds endpoint to a SmallMolecule."""
    data = entry.get("data")
    if not data:
        raise ChEBIError(f"No data found for ChEBI ID {entry.get('standardized_chebi_id')}")

    structure = data.get("default_structure") or {}
    return SmallMolecule(
        id=process_id(data["ascii_name"]),
        name=data["ascii_name"],
        canonical_smiles=structure.get("smiles") or None,
        inchi=structure.get("standard_inchi") or None,
        inchikey=structure.get("standard_inchi_key") or None,
        references=[ENTRY_PAGE_URL.format(entry["standardized_chebi_id"])],
    )


class ChEBIClient(BaseFetcher):
    """Client for the ChEBI public API."""

    database = "ChEBI"
    error_cls = ChEBIError

    async def get_entries(self, chebi_ids: list[str]) -> list[dict[str, Any]]:
        """Fetch raw compound entries, in the order the API returns them."""
        if not chebi_ids:
            return []
        data = await self.get_json(COMPOUNDS_URL, params={"chebi_ids": ",".join(chebi_ids)})
        if not data:
            raise ChEBIError(f"No data found for ChEBI ID {', '.join(chebi_ids)}")
        return list(data.values())

    async def fetch(self, chebi_id: str) -> SmallMolecule:
        """Fetch one entry as a SmallMolecule."""
        entries = await self.get_entries([chebi_id])
        return process_chebi_entry(entries[0])

    async def fetch_batch(self, chebi_ids: list[str]) -> list[SmallMolecule]:
        entries = await self.get_entries(chebi_ids)
        return [process_chebi_entry(entry) for entry in entries]

    async def search_ids(self, query: str, size: int | None = None) -> list[str]:
        """Full-text search returning ChEBI accessions."""
        params: dict[str, Any] = {"term": query}
        if size:
            params["size"] = size
        data = await self.get_json(SEARCH_URL, params=params)
        return [hit["_source"]["chebi_accession"] for hit in data.get("results", [])]

    async def search(self, query: str, size: int | None = None) -> list[SmallMolecule]:
        chebi_ids = await self.search_ids(query, size)
        logger.debug("ChEBI search %r matched %d entries", query, len(chebi_ids))
        return await self.fetch_batch(chebi_ids)


async def fetch_chebi(chebi_id: str, client: httpx.AsyncClient | None = None) -> SmallMolecule:
    """
    Fetch a ChEBI entry by ID and convert it to a SmallMolecule.

    Raises:
        ChEBIError: If the ID is unknown or the server cannot be reached
    """
    async with ChEBIClient(client) as chebi:
        return await chebi.fetch(chebi_id)


async def fetch_chebi_batch(
    chebi_ids: list[str],
    client: httpx.AsyncClient | None = None,
) -> list[SmallMolecule]:
    """Fetch several ChEBI entries in one request."""
    async with ChEBIClient(client) as chebi:
        return await chebi.fetch_batch(chebi_ids)


async def search_chebi(
    query: str,
    size: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[SmallMolecule]:
    """Search ChEBI and fetch every hit."""
    async with ChEBIClient(client) as chebi:
        return await chebi.search(query, size)
