"""
Input Types for enzymeml-llm

Inputs are converted to chat messages before an extraction starts:
- UserQuery / SystemQuery: plain text
- ImageUpload: an image inlined as a base64 data URL
- PDFUpload: a PDF uploaded through the provider's file API

File inputs must be uploaded (``await inp.upload(client)``) before they
can be converted.
"""

import base64
import logging
import mimetypes
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from .errors import UnsupportedFileTypeError, UploadRequiredError

if TYPE_CHECKING:
    from .core.llm_client import LLMClient


logger = logging.getLogger(__name__)

FilePurpose = Literal["user_data", "vision"]

SUPPORTED_FILE_TYPES: dict[FilePurpose, tuple[str, ...]] = {
    "user_data": (".pdf",),
    "vision": (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tiff", ".tif"),
}


def _all_supported() -> list[str]:
    return [ext for exts in SUPPORTED_FILE_TYPES.values() for ext in exts]


def is_file_type_supported(path: str | Path) -> bool:
    """Check if a file extension is accepted for upload."""
    return Path(path).suffix.lower() in _all_supported()


def get_file_purpose(path: str | Path) -> FilePurpose:
    """
    Determine the upload purpose from a file extension.

    Raises:
        UnsupportedFileTypeError: If the extension is not supported
    """
    ext = Path(path).suffix.lower()
    for purpose, extensions in SUPPORTED_FILE_TYPES.items():
        if ext in extensions:
            return purpose
    raise UnsupportedFileTypeError(
        f"Unsupported file type: {ext or '(none)'}. "
        f"Supported types: {', '.join(_all_supported())}"
    )


@dataclass(frozen=True)
class UploadResult:
    """A file made available to the model."""
    id: str
    filename: str
    purpose: FilePurpose
    bytes: int = 0


async def upload_file(
    client: "LLMClient",
    path: str | Path,
    purpose: FilePurpose | None = None,
) -> UploadResult:
    """
    Upload a file, detecting its purpose from the extension when not given.

    Raises:
        UnsupportedFileTypeError: If no purpose is given and the extension is unknown
    """
    path = Path(path)
    purpose = purpose or get_file_purpose(path)
    file_id = await client.upload_file(path, purpose)
    return UploadResult(
        id=file_id,
        filename=path.name,
        purpose=purpose,
        bytes=path.stat().st_size,
    )


class BaseInput(ABC):
    """Common interface of every extraction input."""

    default_role = "user"

    def __init__(self):
        self.upload_result: UploadResult | None = None

    @abstractmethod
    async def upload(self, client: "LLMClient") -> None:
        """Make the input available to the model."""

    @abstractmethod
    def to_input_content(self) -> Any:
        """Convert to chat message content."""

    def to_message(self, role: str | None = None) -> dict[str, Any]:
        return {"role": role or self.default_role, "content": self.to_input_content()}


class UserQuery(BaseInput):
    """A text query from the user."""

    def __init__(self, query: str):
        super().__init__()
        self.query = query

    async def upload(self, client: "LLMClient") -> None:
        return None

    def to_input_content(self) -> str:
        return self.query


class SystemQuery(UserQuery):
    """A system prompt. Converts to a system message by default."""

    default_role = "system"

    @property
    def prompt(self) -> str:
        return self.query


class _FileInput(BaseInput):
    purpose: FilePurpose

    def __init__(self, file: str | Path):
        super().__init__()
        self.file = Path(file)
        if self.file.suffix.lower() not in SUPPORTED_FILE_TYPES[self.purpose]:
            raise UnsupportedFileTypeError(
                f"File {self.file} is not a supported file type. "
                f"Supported types: {', '.join(SUPPORTED_FILE_TYPES[self.purpose])}"
            )

    @property
    def filename(self) -> str:
        return self.file.name

    def _require_upload(self) -> UploadResult:
        if self.upload_result is None:
            raise UploadRequiredError(
                "File must be uploaded before converting to input content. Call upload() first."
            )
        return self.upload_result


class ImageUpload(_FileInput):
    """An image for vision-capable models."""

    purpose = "vision"

    def __init__(self, file: str | Path):
        super().__init__(file)
        self._data_url: str | None = None

    async def upload(self, client: "LLMClient") -> None:
        # Chat completions take images inline rather than by file ID
        data = self.file.read_bytes()
        mime = mimetypes.guess_type(self.file.name)[0] or "image/png"
        self._data_url = f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"
        self.upload_result = UploadResult(
            id=f"inline:{self.file.name}",
            filename=self.file.name,
            purpose=self.purpose,
            bytes=len(data),
        )
        logger.debug("Inlined image %s (%d bytes)", self.file.name, len(data))

    def to_input_content(self) -> list[dict[str, Any]]:
        self._require_upload()
        return [{"type": "image_url", "image_url": {"url": self._data_url}}]


class PDFUpload(_FileInput):
    """A PDF document uploaded through the file API."""

    purpose = "user_data"

    async def upload(self, client: "LLMClient") -> None:
        self.upload_result = await upload_file(client, self.file, self.purpose)

    def to_input_content(self) -> list[dict[str, Any]]:
        result = self._require_upload()
        return [{"type": "file", "file": {"file_id": result.id}}]
