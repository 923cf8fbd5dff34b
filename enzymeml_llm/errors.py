"""
Exception hierarchy for enzymeml-llm.

Tool-level failures never surface as exceptions (they are converted into
error payloads by the executor). The exceptions below cover the places
where the library is allowed to raise: fetchers, input preparation and
registry misuse.
"""


class EnzymeMLError(Exception):
    """Base class for all errors raised by enzymeml-llm."""


class FetcherError(EnzymeMLError):
    """Raised when a database fetcher cannot produce an entity."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class UnsupportedFileTypeError(EnzymeMLError, ValueError):
    """Raised when a file extension is not accepted by the upload API."""


class UploadRequiredError(EnzymeMLError, RuntimeError):
    """Raised when a file input is converted before it was uploaded."""


class ToolRegistrationError(EnzymeMLError, ValueError):
    """Raised when a tool name is registered twice."""


class ChEBIError(FetcherError):
    """Raised when a ChEBI lookup fails."""


class PDBError(FetcherError):
    """Raised when a PDB lookup fails."""


class UniProtError(FetcherError):
    """Raised when a UniProt lookup fails."""


class RheaError(FetcherError):
    """Raised when a Rhea lookup fails."""


class PubChemError(FetcherError):
    """Raised when a PubChem lookup fails."""
