"""Shared fixtures: an httpx client over a mock transport for database lookups."""

import httpx
import pytest
import pytest_asyncio


class Router:
    """Routes requests to canned responses by (method, path) and records them."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, path, response=None, method="GET", **kwargs):
        """Register a response; kwargs are passed to httpx.Response."""
        if response is None:
            response = httpx.Response(kwargs.pop("status_code", 200), **kwargs)
        self.routes[(method, path)] = response
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        if callable(route):
            return route(request)
        return route


@pytest.fixture
def router():
    return Router()


@pytest_asyncio.fixture
async def http_client(router):
    """AsyncClient whose transport is the router."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(router.handler)) as client:
        yield client


@pytest.fixture
def chebi_entry():
    """Builder for compounds-endpoint entries in the ChEBI backend format."""
    def build(chebi_id, name, smiles="C", inchi="InChI=1S/X", inchikey="KEY"):
        return {
            "standardized_chebi_id": chebi_id,
            "data": {
                "ascii_name": name,
                "default_structure": {
                    "smiles": smiles,
                    "standard_inchi": inchi,
                    "standard_inchi_key": inchikey,
                },
            },
        }

    return build
