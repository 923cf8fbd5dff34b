"""
PubChem fetcher.

Looks up compounds through PubChem PUG REST and maps them to
SmallMolecule objects.
"""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from ..errors import PubChemError
from ..schemas.entities import SmallMolecule
from .base import BaseFetcher, process_id


logger = logging.getLogger(__name__)

BASE_URL = "https://pubchem.ncbi.nlm.nih.gov/rest/pug/compound"
PROPERTIES = "Title,SMILES,InChI,InChIKey,MolecularFormula"


def process_pubchem_properties(props: dict[str, Any]) -> SmallMolecule:
    """Map one PropertyTable row to a SmallMolecule."""
    cid = props.get("CID")
    if cid is None:
        raise PubChemError("PubChem record has no CID")
    title = props.get("Title")
    return SmallMolecule(
        id=process_id(title) if title else f"cid_{cid}",
        name=title or props.get("MolecularFormula") or f"CID {cid}",
        canonical_smiles=props.get("SMILES") or props.get("CanonicalSMILES"),
        inchi=props.get("InChI"),
        inchikey=props.get("InChIKey"),
        references=[f"https://pubchem.ncbi.nlm.nih.gov/compound/{cid}"],
    )


class PubChemClient(BaseFetcher):
    """Client for PubChem PUG REST."""

    database = "PubChem"
    error_cls = PubChemError

    async def get_cids(self, name: str) -> list[int]:
        """CIDs matching a compound name. An unknown name yields an empty list."""
        url = f"{BASE_URL}/name/{quote(name, safe='')}/cids/JSON"
        try:
            response = await self.client.get(url)
        except httpx.HTTPError as e:
            raise PubChemError(f"Connection to PubChem failed: {e}", e) from e

        # PubChem answers an unknown name with a 404 fault
        if response.status_code == 404:
            return []
        try:
            response.raise_for_status()
            return list((response.json().get("IdentifierList") or {}).get("CID") or [])
        except httpx.HTTPStatusError as e:
            raise PubChemError(f"PubChem returned HTTP {e.response.status_code}", e) from e
        except ValueError as e:
            raise PubChemError(f"Invalid JSON from PubChem: {e}", e) from e

    async def get_properties(self, cids: list[int]) -> list[dict[str, Any]]:
        if not cids:
            return []
        ids = ",".join(str(cid) for cid in cids)
        data = await self.get_json(f"{BASE_URL}/cid/{ids}/property/{PROPERTIES}/JSON")
        return (data.get("PropertyTable") or {}).get("Properties") or []

    async def fetch(self, name: str) -> SmallMolecule:
        """Fetch the best match for a compound name."""
        cids = await self.get_cids(name)
        if not cids:
            raise PubChemError(f"No PubChem compound found for '{name}'")
        properties = await self.get_properties(cids[:1])
        if not properties:
            raise PubChemError(f"No properties returned for PubChem CID {cids[0]}")
        return process_pubchem_properties(properties[0])

    async def search(self, query: str, size: int | None = None) -> list[SmallMolecule]:
        cids = await self.get_cids(query)
        if size:
            cids = cids[:size]
        logger.debug("PubChem search %r matched %d compounds", query, len(cids))
        return [process_pubchem_properties(p) for p in await self.get_properties(cids)]


async def fetch_pubchem(name: str, client: httpx.AsyncClient | None = None) -> SmallMolecule:
    """
    Fetch a compound by name and convert it to a SmallMolecule.

    Raises:
        PubChemError: If no compound matches or the server cannot be reached
    """
    async with PubChemClient(client) as pubchem:
        return await pubchem.fetch(name)


async def search_pubchem(
    query: str,
    size: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> list[SmallMolecule]:
    """Search PubChem by name."""
    async with PubChemClient(client) as pubchem:
        return await pubchem.search(query, size)
