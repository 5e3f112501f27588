"""Tests for HTTP and local-file document sources."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from contract_parser.lib.errors import DocumentNotFoundError, UpstreamFetchError
from contract_parser.models.config import DocumentSourceConfig
from contract_parser.services.document_source import (
    DocumentContent,
    DocumentSource,
    HttpDocumentSource,
    LocalFileDocumentSource,
)


def make_response(
    status_code: int = 200,
    content: bytes = b"",
    headers: dict[str, str] | None = None,
    reason: str = "OK",
) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = content
    response.headers = headers if headers is not None else {}
    response.reason = reason
    return response


@pytest.fixture
def session() -> MagicMock:
    """Mock requests session."""
    return MagicMock(spec=requests.Session)


@pytest.mark.unit
class TestHttpDocumentSource:
    """Tests for HttpDocumentSource."""

    def test_satisfies_protocol(self, session: MagicMock) -> None:
        """Test the source implements DocumentSource."""
        assert isinstance(HttpDocumentSource(session=session), DocumentSource)

    def test_from_config(self) -> None:
        """Test settings come from the document_source section."""
        config = DocumentSourceConfig(base_url="https://docs.example.com/", timeout=30)
        source = HttpDocumentSource.from_config(config)
        assert source.base_url == "https://docs.example.com"
        assert source.timeout == 30

    def test_content_url_quotes_id(self, session: MagicMock) -> None:
        """Test document ids are URL-encoded."""
        source = HttpDocumentSource("https://svc/", session=session)
        assert source.content_url("a b/c") == "https://svc/api/Documents/a%20b%2Fc/content"

    def test_fetches_bytes_and_type(self, session: MagicMock) -> None:
        """Test a successful download."""
        session.get.return_value = make_response(
            content=b"AGREEMENT",
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
        source = HttpDocumentSource("https://svc", timeout=12.0, session=session)

        content = source.get_document_bytes("doc-1")

        assert content == DocumentContent(data=b"AGREEMENT", content_type="text/plain")
        session.get.assert_called_once_with(
            "https://svc/api/Documents/doc-1/content", timeout=12.0
        )

    def test_missing_content_type_defaults_to_text(self, session: MagicMock) -> None:
        """Test responses without a content type are treated as text."""
        session.get.return_value = make_response(content=b"x")
        content = HttpDocumentSource(session=session).get_document_bytes("doc-1")
        assert content.content_type == "text/plain"

    def test_not_found(self, session: MagicMock) -> None:
        """Test a 404 raises DocumentNotFoundError."""
        session.get.return_value = make_response(status_code=404, reason="Not Found")
        with pytest.raises(DocumentNotFoundError) as exc_info:
            HttpDocumentSource(session=session).get_document_bytes("doc-1")
        assert exc_info.value.status_code == 404
        assert exc_info.value.document_id == "doc-1"

    def test_server_error(self, session: MagicMock) -> None:
        """Test other non-2xx statuses raise UpstreamFetchError."""
        session.get.return_value = make_response(
            status_code=503, reason="Service Unavailable"
        )
        with pytest.raises(UpstreamFetchError) as exc_info:
            HttpDocumentSource(session=session).get_document_bytes("doc-1")
        assert not isinstance(exc_info.value, DocumentNotFoundError)
        assert exc_info.value.status_code == 503
        assert "Service Unavailable" in str(exc_info.value)

    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (requests.exceptions.Timeout("slow"), "timed out"),
            (requests.exceptions.ConnectionError("refused"), "Connection failed"),
            (requests.exceptions.TooManyRedirects("loop"), "loop"),
        ],
    )
    def test_transport_errors(
        self, session: MagicMock, error: Exception, message: str
    ) -> None:
        """Test transport failures raise UpstreamFetchError."""
        session.get.side_effect = error
        with pytest.raises(UpstreamFetchError, match=message) as exc_info:
            HttpDocumentSource(session=session).get_document_bytes("doc-1")
        assert exc_info.value.status_code is None


@pytest.mark.unit
class TestLocalFileDocumentSource:
    """Tests for LocalFileDocumentSource."""

    def test_reads_relative_path(self, temp_dir: Path) -> None:
        """Test ids are resolved against the base directory."""
        (temp_dir / "contract.txt").write_bytes(b"AGREEMENT")
        source = LocalFileDocumentSource(temp_dir)

        content = source.get_document_bytes("contract.txt")

        assert content == DocumentContent(data=b"AGREEMENT", content_type="text/plain")

    def test_reads_absolute_path(self, temp_dir: Path) -> None:
        """Test absolute ids ignore the base directory."""
        path = temp_dir / "contract.txt"
        path.write_bytes(b"AGREEMENT")
        source = LocalFileDocumentSource("/nonexistent")
        assert source.get_document_bytes(str(path)).data == b"AGREEMENT"

    def test_guesses_pdf_type(self, temp_dir: Path) -> None:
        """Test the content type is guessed from the extension."""
        (temp_dir / "contract.pdf").write_bytes(b"%PDF-1.7")
        content = LocalFileDocumentSource(temp_dir).get_document_bytes("contract.pdf")
        assert content.content_type == "application/pdf"

    def test_unknown_extension_is_text(self, temp_dir: Path) -> None:
        """Test unknown extensions default to text/plain."""
        (temp_dir / "contract.zzcontract").write_bytes(b"AGREEMENT")
        content = LocalFileDocumentSource(temp_dir).get_document_bytes(
            "contract.zzcontract"
        )
        assert content.content_type == "text/plain"

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test a missing file raises DocumentNotFoundError."""
        with pytest.raises(DocumentNotFoundError):
            LocalFileDocumentSource(temp_dir).get_document_bytes("missing.txt")

    def test_directory_is_not_a_document(self, temp_dir: Path) -> None:
        """Test directories are not readable documents."""
        (temp_dir / "folder").mkdir()
        with pytest.raises(DocumentNotFoundError):
            LocalFileDocumentSource(temp_dir).get_document_bytes("folder")
