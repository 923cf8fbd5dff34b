"""
PDB fetcher.

Retrieves structures from the RCSB Protein Data Bank and maps the first
polymer entity to a Protein object.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from ..errors import PDBError
from ..schemas.entities import Protein
from .base import BaseFetcher, process_id, strip_prefix


logger = logging.getLogger(__name__)

BASE_URL = "https://data.rcsb.org/rest/v1/core"
SEARCH_URL = "https://search.rcsb.org/rcsbsearch/v2/query"


@dataclass
class Citation:
    """Citation of a PDB entry."""
    title: str | None = None
    journal_name: str | None = None
    year: int | None = None
    doi: str | None = None
    pubmed_id: str | None = None


@dataclass
class EntityInfo:
    """One polymer entity of a PDB entry."""
    description: str | None = None
    polymer_type: str | None = None
    ec_number: str | None = None
    sequence: str | None = None
    organism_scientific_name: str | None = None
    organism_taxid: int | None = None


@dataclass
class PDBEntry:
    """A PDB entry with its polymer entities keyed by entity ID."""
    pdb_id: str
    title: str | None = None
    experimental_method: str | None = None
    resolution: float | None = None
    citations: list[Citation] = field(default_factory=list)
    polymer_entities: dict[str, EntityInfo] = field(default_factory=dict)


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def build_search_query(query: str) -> dict[str, Any]:
    """Full-text RCSB search returning entry IDs."""
    return {
        "query": {
            "type": "terminal",
            "service": "full_text",
            "parameters": {"value": query},
        },
        "return_type": "entry",
    }


class PDBClient(BaseFetcher):
    """Client for the RCSB data and search APIs."""

    database = "PDB"
    error_cls = PDBError

    async def get_entry_by_id(self, pdb_id: str) -> PDBEntry:
        """Fetch an entry together with all of its polymer entities."""
        pdb_id = pdb_id.upper()
        entry = await self.get_json(f"{BASE_URL}/entry/{pdb_id}")

        entity_ids = (entry.get("rcsb_entry_container_identifiers") or {}).get("polymer_entity_ids") or []
        entities: dict[str, EntityInfo] = {}
        for entity_id in entity_ids:
            data = await self.get_json(f"{BASE_URL}/polymer_entity/{pdb_id}/{entity_id}")
            identifiers = data.get("rcsb_polymer_entity_container_identifiers") or {}
            entities[str(entity_id)] = EntityInfo(
                description=(data.get("rcsb_polymer_entity") or {}).get("pdbx_description"),
                polymer_type=(data.get("entity_poly") or {}).get("type"),
                ec_number=(data.get("rcsb_polymer_entity") or {}).get("pdbx_ec"),
                sequence=(data.get("entity_poly") or {}).get("pdbx_seq_one_letter_code_can"),
                organism_scientific_name=_first(
                    [s.get("scientific_name") for s in data.get("rcsb_entity_source_organism") or []]
                ),
                organism_taxid=_first(
                    [s.get("ncbi_taxonomy_id") for s in data.get("rcsb_entity_source_organism") or []]
                ) or _first(identifiers.get("taxonomy_id")),
            )

        info = entry.get("rcsb_entry_info") or {}
        return PDBEntry(
            pdb_id=pdb_id,
            title=(entry.get("struct") or {}).get("title"),
            experimental_method=info.get("experimental_method"),
            resolution=_first(info.get("resolution_combined")),
            citations=[
                Citation(
                    title=c.get("title"),
                    journal_name=c.get("journal_abbrev"),
                    year=c.get("year"),
                    doi=c.get("pdbx_database_id_DOI"),
                    pubmed_id=c.get("pdbx_database_id_PubMed"),
                )
                for c in entry.get("citation") or []
            ],
            polymer_entities=entities,
        )

    async def fetch(self, pdb_id: str) -> Protein:
        """
        Fetch a PDB entry and convert polymer entity 1 to a Protein.

        Accepts IDs with a ``PDB:`` prefix.
        """
        pdb_id = strip_prefix(pdb_id, "PDB")
        entry = await self.get_entry_by_id(pdb_id)

        if not entry.polymer_entities:
            raise PDBError(f"No polymer entities to fetch from in PDB {pdb_id}")

        entity = entry.polymer_entities.get("1")
        if entity is None:
            raise PDBError(f"Entity ID 1 not found in PDB {pdb_id}")

        name = entity.description or entry.title or f"PDB {pdb_id}"
        protein_id = process_id(entity.description) if entity.description else f"{pdb_id.lower()}_1"

        references = [f"https://www.rcsb.org/structure/{pdb_id.upper()}"]
        if entry.citations:
            citation = entry.citations[0]
            if citation.doi:
                references.append(f"https://doi.org/{citation.doi}")
            if citation.pubmed_id:
                references.append(f"https://pubmed.ncbi.nlm.nih.gov/{citation.pubmed_id}")

        return Protein(
            id=protein_id,
            name=name,
            sequence=entity.sequence,
            organism=entity.organism_scientific_name,
            organism_tax_id=str(entity.organism_taxid) if entity.organism_taxid else None,
            ecnumber=entity.ec_number,
            references=references,
        )

    async def search_ids(self, query: str) -> list[str]:
        """Full-text search returning entry IDs. No hits yields an empty list."""
        response = await self.request("POST", SEARCH_URL, json=build_search_query(query))
        if not response.text.strip():
            return []
        try:
            data = response.json()
        except ValueError as e:
            raise PDBError(f"Invalid JSON from PDB search: {e}", e) from e
        return [hit["identifier"] for hit in data.get("result_set") or []]

    async def search(self, query: str, size: int | None = None) -> list[Protein]:
        pdb_ids = await self.search_ids(query)
        if size:
            pdb_ids = pdb_ids[:size]
        logger.debug("PDB search %r matched %d entries", query, len(pdb_ids))
        return list(await asyncio.gather(*(self.fetch(pdb_id) for pdb_id in pdb_ids)))


async def fetch_pdb(pdb_id: str, client: httpx.AsyncClient | None = None) -> Protein:
    """
    Fetch a PDB entry by ID and convert it to a Protein.

    Raises:
        PDBError: If the entry is unknown, has no entity 1, or the server fails
    """
    async with PDBClient(client) as pdb:
        return await pdb.fetch(pdb_id)


async def search_pdb(
    query: str,
    size: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[Protein]:
    """Search the PDB and fetch every hit."""
    async with PDBClient(client) as pdb:
        return await pdb.search(query, size)
