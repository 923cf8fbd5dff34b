"""
Rhea fetcher.

Retrieves reactions from Rhea and resolves their participants through
ChEBI. The first ``n_reactants`` ChEBI IDs of a reaction are its
reactants, the remaining ones its products.
"""

import asyncio
import csv
import io
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import RheaError
from ..schemas.entities import Reaction, ReactionElement, SmallMolecule
from .base import BaseFetcher, strip_prefix
from .chebi import ChEBIClient


logger = logging.getLogger(__name__)

QUERY_URL = "https://www.rhea-db.org/rhea/"


def parse_tsv(text: str) -> list[dict[str, str]]:
    """Parse a Rhea TSV export into rows keyed by column header."""
    lines = text.strip().splitlines()
    if len(lines) < 2:
        raise RheaError("Invalid TSV format: insufficient lines")
    return list(csv.DictReader(io.StringIO("\n".join(lines)), delimiter="\t"))


def count_sides(equation: str) -> tuple[int, int]:
    """Number of participants left and right of ``=``."""
    left, _, right = equation.partition("=")
    return len(left.split("+")), len(right.split("+"))


@dataclass
class RheaEntry:
    """A Rhea reaction with the ChEBI IDs of its participants."""
    id: str
    equation: str
    balanced: bool
    chebi_ids: list[str]


class RheaClient(BaseFetcher):
    """Client for the Rhea query API."""

    database = "Rhea"
    error_cls = RheaError

    def _params(self, rhea_id: str, fmt: str) -> dict[str, Any]:
        return {
            "query": f"RHEA:{rhea_id}",
            "columns": "rhea-id,equation,chebi-id",
            "format": fmt,
            "limit": 10,
        }

    async def from_id(self, rhea_id: str) -> RheaEntry:
        """Fetch a reaction. Accepts IDs with a ``RHEA:`` prefix."""
        rhea_id = strip_prefix(rhea_id, "RHEA")

        tsv = await self.request("GET", QUERY_URL, params=self._params(rhea_id, "tsv"))
        rows = parse_tsv(tsv.text)
        data = await self.get_json(QUERY_URL, params=self._params(rhea_id, "json"))

        results = data.get("results") or []
        if not results:
            raise RheaError(f"No results found for RHEA ID: {rhea_id}")
        if not rows:
            raise RheaError(f"No TSV data found for RHEA ID: {rhea_id}")

        result = results[0]
        chebi_ids = [cid for cid in rows[0].get("ChEBI identifier", "").split(";") if cid.strip()]
        return RheaEntry(
            id=strip_prefix(str(result["id"]), "RHEA"),
            equation=result["equation"],
            balanced=bool(result.get("balanced", False)),
            chebi_ids=chebi_ids,
        )

    async def fetch(self, rhea_id: str) -> tuple[Reaction, list[SmallMolecule]]:
        entry = await self.from_id(rhea_id)
        n_reactants, n_products = count_sides(entry.equation)
        if len(entry.chebi_ids) != n_reactants + n_products:
            logger.warning(
                "Expected %d ChEBI IDs for RHEA:%s but got %d",
                n_reactants + n_products, entry.id, len(entry.chebi_ids),
            )

        chebi = ChEBIClient(self.client, self.settings)
        molecules = list(await asyncio.gather(*(chebi.fetch(cid) for cid in entry.chebi_ids)))

        elements = [ReactionElement(species_id=m.id, stoichiometry=1) for m in molecules]
        reaction = Reaction(
            id=f"RHEA:{entry.id}",
            name=f"RHEA:{entry.id}",
            reversible=entry.balanced,
            reactants=elements[:n_reactants],
            products=elements[n_reactants:],
        )
        return reaction, molecules


async def fetch_rhea(
    rhea_id: str,
    client: httpx.AsyncClient | None = None,
) -> tuple[Reaction, list[SmallMolecule]]:
    """
    Fetch a Rhea reaction and the small molecules taking part in it.

    Raises:
        RheaError: If the reaction is unknown or the server cannot be reached
        ChEBIError: If a participant cannot be resolved
    """
    async with RheaClient(client) as rhea:
        return await rhea.fetch(rhea_id)
