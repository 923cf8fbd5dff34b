"""Unit tests for input types and file helpers."""

import base64
from unittest.mock import AsyncMock

import pytest

from enzymeml_llm.errors import UnsupportedFileTypeError, UploadRequiredError
from enzymeml_llm.inputs import (
    ImageUpload,
    PDFUpload,
    SystemQuery,
    UserQuery,
    get_file_purpose,
    is_file_type_supported,
    upload_file,
)


@pytest.fixture
def llm_client():
    client = AsyncMock()
    client.upload_file.return_value = "file-123"
    return client


class TestFileHelpers:
    """Tests for file type helpers."""

    @pytest.mark.parametrize("name", ["paper.pdf", "PAPER.PDF", "plot.png", "scan.TIFF", "fig.jpeg"])
    def test_supported(self, name):
        assert is_file_type_supported(name)

    @pytest.mark.parametrize("name", ["data.csv", "notes.txt", "README"])
    def test_unsupported(self, name):
        assert not is_file_type_supported(name)

    def test_purpose(self):
        assert get_file_purpose("paper.pdf") == "user_data"
        assert get_file_purpose("plot.webp") == "vision"

    def test_unsupported_purpose_names_extension(self):
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            get_file_purpose("data.xlsx")
        message = str(exc_info.value)
        assert ".xlsx" in message
        assert ".pdf" in message

    @pytest.mark.asyncio
    async def test_upload_file_detects_purpose(self, tmp_path, llm_client):
        path = tmp_path / "paper.pdf"
        path.write_bytes(b"%PDF-1.4 body")

        result = await upload_file(llm_client, path)

        llm_client.upload_file.assert_awaited_once_with(path, "user_data")
        assert result.id == "file-123"
        assert result.filename == "paper.pdf"
        assert result.bytes == len(b"%PDF-1.4 body")


class TestQueries:
    """Tests for text inputs."""

    def test_user_query(self):
        assert UserQuery("Hi").to_message() == {"role": "user", "content": "Hi"}

    def test_system_query(self):
        query = SystemQuery("Be precise")
        assert query.prompt == "Be precise"
        assert query.to_message() == {"role": "system", "content": "Be precise"}

    def test_role_override(self):
        assert UserQuery("Hi").to_message("assistant")["role"] == "assistant"

    @pytest.mark.asyncio
    async def test_upload_is_noop(self, llm_client):
        await UserQuery("Hi").upload(llm_client)
        llm_client.upload_file.assert_not_awaited()


class TestPDFUpload:
    """Tests for PDFUpload."""

    def test_rejects_non_pdf(self, tmp_path):
        with pytest.raises(UnsupportedFileTypeError):
            PDFUpload(tmp_path / "figure.png")

    def test_convert_before_upload(self, tmp_path):
        with pytest.raises(UploadRequiredError):
            PDFUpload(tmp_path / "paper.pdf").to_input_content()

    @pytest.mark.asyncio
    async def test_file_reference(self, tmp_path, llm_client):
        path = tmp_path / "paper.pdf"
        path.write_bytes(b"%PDF")
        pdf = PDFUpload(path)

        await pdf.upload(llm_client)

        assert pdf.upload_result.purpose == "user_data"
        assert pdf.to_message() == {
            "role": "user",
            "content": [{"type": "file", "file": {"file_id": "file-123"}}],
        }


class TestImageUpload:
    """Tests for ImageUpload."""

    def test_rejects_pdf(self, tmp_path):
        with pytest.raises(UnsupportedFileTypeError):
            ImageUpload(tmp_path / "paper.pdf")

    def test_convert_before_upload(self, tmp_path):
        with pytest.raises(UploadRequiredError):
            ImageUpload(tmp_path / "plot.png").to_input_content()

    @pytest.mark.asyncio
    async def test_inlined_as_data_url(self, tmp_path, llm_client):
        """Test images are inlined rather than uploaded."""
        path = tmp_path / "plot.png"
        path.write_bytes(b"\x89PNG\r\n")
        image = ImageUpload(path)

        await image.upload(llm_client)

        llm_client.upload_file.assert_not_awaited()
        content = image.to_input_content()
        url = content[0]["image_url"]["url"]
        assert content[0]["type"] == "image_url"
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == b"\x89PNG\r\n"
        assert image.upload_result.bytes == 6
