"""Document byte sources.

A document source resolves a document id to its raw bytes and content
type. ``HttpDocumentSource`` talks to the document upload service;
``LocalFileDocumentSource`` reads files from a directory and backs the CLI.
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

from contract_parser.lib.errors import DocumentNotFoundError, UpstreamFetchError
from contract_parser.lib.logging_config import get_logger
from contract_parser.lib.text_extractor import TEXT_PLAIN
from contract_parser.models.config import DocumentSourceConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class DocumentContent:
    """Raw document bytes with their content type.

    Attributes:
        data: Document bytes
        content_type: MIME type reported by the source
    """

    data: bytes
    content_type: str


@runtime_checkable
class DocumentSource(Protocol):
    """Resolves document ids to document bytes."""

    def get_document_bytes(self, document_id: str) -> DocumentContent:
        """Fetch a document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            UpstreamFetchError: If the document cannot be retrieved.
        """
        ...


class HttpDocumentSource:
    """Fetch document bytes from the document upload service.

    Example:
        >>> source = HttpDocumentSource("https://localhost:7001")
        >>> content = source.get_document_bytes("3f2b...")
        >>> content.content_type
        'application/pdf'
    """

    DEFAULT_BASE_URL = "https://localhost:7001"
    DEFAULT_TIMEOUT = 300.0  # seconds

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            base_url: Document upload service base URL
            timeout: Request timeout in seconds (default: 300)
            session: Optional requests session to reuse
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls, config: DocumentSourceConfig) -> "HttpDocumentSource":
        """Build a source from the ``document_source`` config section."""
        return cls(base_url=config.base_url, timeout=config.timeout)

    def content_url(self, document_id: str) -> str:
        """Return the content endpoint URL for a document."""
        return f"{self.base_url}/api/Documents/{quote(document_id, safe='')}/content"

    def get_document_bytes(self, document_id: str) -> DocumentContent:
        """Download a document's bytes.

        Args:
            document_id: Document identifier

        Returns:
            DocumentContent; the content type defaults to ``text/plain`` when
            the response does not carry one.

        Raises:
            DocumentNotFoundError: The service answered 404
            UpstreamFetchError: Connection failure, timeout or other non-2xx
        """
        url = self.content_url(document_id)
        logger.info(f"Retrieving document content from: {url}")

        try:
            response = self._session.get(url, timeout=self.timeout)
        except Timeout as e:
            raise UpstreamFetchError(
                document_id, f"Request timed out after {self.timeout}s"
            ) from e
        except RequestsConnectionError as e:
            raise UpstreamFetchError(document_id, f"Connection failed: {e}") from e
        except RequestException as e:
            raise UpstreamFetchError(document_id, str(e)) from e

        if response.status_code == 404:
            logger.warning(f"Document not found. Status: 404, Url: {url}")
            raise DocumentNotFoundError(document_id)

        if not response.ok:
            logger.warning(
                f"Failed to retrieve document content. "
                f"Status: {response.status_code}, Url: {url}"
            )
            raise UpstreamFetchError(
                document_id,
                response.reason or "Unexpected response",
                status_code=response.status_code,
            )

        header = response.headers.get("Content-Type") or ""
        content_type = header.split(";", 1)[0].strip() or TEXT_PLAIN
        data = response.content

        logger.debug(
            f"Retrieved document content. Size: {len(data)} bytes, "
            f"ContentType: {content_type}"
        )
        return DocumentContent(data=data, content_type=content_type)


class LocalFileDocumentSource:
    """Resolve document ids to files under a base directory.

    The id is either a path relative to the directory or an absolute path.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        """Initialize the source.

        Args:
            base_dir: Directory ids are resolved against. Defaults to the
                current working directory.
        """
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    def resolve(self, document_id: str) -> Path:
        """Return the file path for a document id."""
        path = Path(document_id)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def get_document_bytes(self, document_id: str) -> DocumentContent:
        """Read a document from disk.

        Raises:
            DocumentNotFoundError: If the file does not exist.
            UpstreamFetchError: If the file cannot be read.
        """
        path = self.resolve(document_id)
        if not path.is_file():
            raise DocumentNotFoundError(document_id)

        try:
            data = path.read_bytes()
        except OSError as e:
            raise UpstreamFetchError(document_id, f"Cannot read {path}: {e}") from e

        content_type, _ = mimetypes.guess_type(path.name)
        return DocumentContent(data=data, content_type=content_type or TEXT_PLAIN)
