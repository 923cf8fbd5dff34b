"""
Database fetchers for enzymeml-llm.

Async clients for ChEBI, PDB, UniProt, Rhea and PubChem that map database
records to EnzymeML entities.
"""

from .base import BaseFetcher, create_http_client, process_id
from .chebi import ChEBIClient, fetch_chebi, fetch_chebi_batch, search_chebi
from .pdb import PDBClient, fetch_pdb, search_pdb
from .pubchem import PubChemClient, fetch_pubchem, search_pubchem
from .rhea import RheaClient, fetch_rhea
from .uniprot import UniProtClient, fetch_uniprot, search_uniprot

__all__ = [
    "BaseFetcher",
    "create_http_client",
    "process_id",
    "ChEBIClient",
    "fetch_chebi",
    "fetch_chebi_batch",
    "search_chebi",
    "PDBClient",
    "fetch_pdb",
    "search_pdb",
    "PubChemClient",
    "fetch_pubchem",
    "search_pubchem",
    "RheaClient",
    "fetch_rhea",
    "UniProtClient",
    "fetch_uniprot",
    "search_uniprot",
]
