"""
UniProt fetcher.

Retrieves UniProtKB entries through the UniProt REST API and maps them to
Protein objects.
"""

import logging
from typing import Any

import httpx

from ..errors import UniProtError
from ..schemas.entities import Protein
from .base import BaseFetcher, process_id, strip_prefix


logger = logging.getLogger(__name__)

BASE_URL = "https://rest.uniprot.org/uniprotkb"


def process_uniprot_entry(entry: dict[str, Any]) -> Protein:
    """Map a UniProtKB JSON entry to a Protein."""
    accession = entry.get("primaryAccession")
    if not accession:
        raise UniProtError("UniProt entry has no primary accession")

    recommended = (entry.get("proteinDescription") or {}).get("recommendedName") or {}
    full_name = (recommended.get("fullName") or {}).get("value")
    ec_numbers = recommended.get("ecNumbers") or []
    organism = entry.get("organism") or {}
    tax_id = organism.get("taxonId")

    return Protein(
        id=process_id(full_name) if full_name else accession,
        name=full_name or accession,
        sequence=(entry.get("sequence") or {}).get("value"),
        organism=organism.get("scientificName"),
        organism_tax_id=str(tax_id) if tax_id else None,
        ecnumber=ec_numbers[0]["value"] if ec_numbers else None,
        references=[f"https://www.uniprot.org/uniprotkb/{accession}"],
    )


class UniProtClient(BaseFetcher):
    """Client for the UniProtKB REST API."""

    database = "UniProt"
    error_cls = UniProtError

    async def get_entry_by_id(self, uniprot_id: str) -> dict[str, Any]:
        return await self.get_json(f"{BASE_URL}/{uniprot_id}.json")

    async def fetch(self, uniprot_id: str) -> Protein:
        """Fetch one entry. Accepts IDs with a ``uniprot:`` prefix."""
        uniprot_id = strip_prefix(uniprot_id, "uniprot")
        entry = await self.get_entry_by_id(uniprot_id)
        if not entry:
            raise UniProtError(f"No data found for UniProt ID {uniprot_id}")
        return process_uniprot_entry(entry)

    async def search(self, query: str, size: int | None = None) -> list[Protein]:
        params: dict[str, Any] = {"query": query, "format": "json"}
        if size:
            params["size"] = size
        data = await self.get_json(f"{BASE_URL}/search", params=params)
        results = data.get("results") or []
        logger.debug("UniProt search %r matched %d entries", query, len(results))
        return [process_uniprot_entry(entry) for entry in results]


async def fetch_uniprot(uniprot_id: str, client: httpx.AsyncClient | None = None) -> Protein:
    """
    Fetch a UniProt entry by ID and convert it to a Protein.

    Raises:
        UniProtError: If the entry is unknown or the server cannot be reached
    """
    async with UniProtClient(client) as uniprot:
        return await uniprot.fetch(uniprot_id)


async def search_uniprot(
    query: str,
    size: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[Protein]:
    """Search UniProtKB."""
    async with UniProtClient(client) as uniprot:
        return await uniprot.search(query, size)
