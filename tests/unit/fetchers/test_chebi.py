"""Unit tests for the ChEBI fetcher."""

import httpx
import pytest

from enzymeml_llm.errors import ChEBIError, FetcherError
from enzymeml_llm.fetchers.base import process_id, strip_prefix
from enzymeml_llm.fetchers.chebi import (
    ChEBIClient,
    fetch_chebi,
    fetch_chebi_batch,
    process_chebi_entry,
    search_chebi,
)

COMPOUNDS = "/chebi/backend/api/public/compounds/"
SEARCH = "/chebi/backend/api/public/es_search/"


class TestHelpers:
    """Tests for identifier helpers."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("D-glucose", "d_glucose"),
            ("ATP(4-)", "atp_4"),
            ("  water  ", "water"),
            ("beta-D-fructose 1,6-bisphosphate", "beta_d_fructose_1_6_bisphosphate"),
        ],
    )
    def test_process_id(self, name, expected):
        assert process_id(name) == expected

    def test_strip_prefix(self):
        assert strip_prefix("CHEBI:15377", "chebi") == "15377"
        assert strip_prefix("15377", "CHEBI") == "15377"


class TestProcessEntry:
    """Tests for mapping compound entries."""

    def test_maps_structure(self, chebi_entry):
        """Test structure fields and the reference URL."""
        molecule = process_chebi_entry(chebi_entry("CHEBI:15377", "water", smiles="[H]O[H]"))
        assert molecule.id == "water"
        assert molecule.name == "water"
        assert molecule.canonical_smiles == "[H]O[H]"
        assert molecule.inchikey == "KEY"
        assert molecule.references == ["https://www.ebi.ac.uk/chebi/searchId.do?chebiId=CHEBI:15377"]

    def test_missing_structure(self):
        """Test entries without a default structure map to empty fields."""
        molecule = process_chebi_entry({
            "standardized_chebi_id": "CHEBI:1",
            "data": {"ascii_name": "thing", "default_structure": None},
        })
        assert molecule.canonical_smiles is None
        assert molecule.inchi is None

    def test_missing_data(self):
        with pytest.raises(ChEBIError):
            process_chebi_entry({"standardized_chebi_id": "CHEBI:1", "data": None})


class TestChEBIClient:
    """Tests for ChEBIClient against a mock transport."""

    @pytest.mark.asyncio
    async def test_fetch(self, router, http_client, chebi_entry):
        """Test one compound is fetched and mapped."""
        router.add(COMPOUNDS, json={"CHEBI:17234": chebi_entry("CHEBI:17234", "glucose")})

        molecule = await fetch_chebi("CHEBI:17234", client=http_client)

        assert molecule.id == "glucose"
        assert router.requests[0].url.params["chebi_ids"] == "CHEBI:17234"

    @pytest.mark.asyncio
    async def test_fetch_batch(self, router, http_client, chebi_entry):
        """Test several IDs go out in one request."""
        router.add(COMPOUNDS, json={
            "CHEBI:1": chebi_entry("CHEBI:1", "a"),
            "CHEBI:2": chebi_entry("CHEBI:2", "b"),
        })

        molecules = await fetch_chebi_batch(["CHEBI:1", "CHEBI:2"], client=http_client)

        assert [m.name for m in molecules] == ["a", "b"]
        assert len(router.requests) == 1
        assert router.requests[0].url.params["chebi_ids"] == "CHEBI:1,CHEBI:2"

    @pytest.mark.asyncio
    async def test_unknown_id(self, router, http_client):
        """Test an empty answer raises ChEBIError."""
        router.add(COMPOUNDS, json={})

        with pytest.raises(ChEBIError, match="No data found"):
            await fetch_chebi("CHEBI:0", client=http_client)

    @pytest.mark.asyncio
    async def test_http_error(self, router, http_client):
        """Test a server error is wrapped with its cause."""
        router.add(COMPOUNDS, status_code=500)

        with pytest.raises(ChEBIError) as exc_info:
            await fetch_chebi("CHEBI:1", client=http_client)

        assert "HTTP 500" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)
        assert isinstance(exc_info.value, FetcherError)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test transport failures are wrapped."""
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(ChEBIError, match="Connection to ChEBI failed"):
                await fetch_chebi("CHEBI:1", client=client)

    @pytest.mark.asyncio
    async def test_search(self, router, http_client, chebi_entry):
        """Test search resolves hits into molecules."""
        router.add(SEARCH, json={"results": [
            {"_source": {"chebi_accession": "CHEBI:17234"}},
        ]})
        router.add(COMPOUNDS, json={"CHEBI:17234": chebi_entry("CHEBI:17234", "glucose")})

        molecules = await search_chebi("glucose", size=1, client=http_client)

        assert [m.name for m in molecules] == ["glucose"]
        assert router.requests[0].url.params["term"] == "glucose"
        assert router.requests[0].url.params["size"] == "1"

    @pytest.mark.asyncio
    async def test_search_without_hits(self, router, http_client):
        """Test no hits means no compounds request."""
        router.add(SEARCH, json={"results": []})

        assert await search_chebi("nothing", client=http_client) == []
        assert len(router.requests) == 1

    @pytest.mark.asyncio
    async def test_caller_client_is_not_closed(self, router, http_client, chebi_entry):
        """Test a passed-in client stays open after the fetcher exits."""
        router.add(COMPOUNDS, json={"CHEBI:1": chebi_entry("CHEBI:1", "a")})

        async with ChEBIClient(http_client) as chebi:
            await chebi.fetch("CHEBI:1")

        assert not http_client.is_closed
