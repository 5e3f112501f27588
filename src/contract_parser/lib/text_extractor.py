"""Decoding of document bytes into plain text.

Binary formats (PDF, Word) are decoded by collaborators that callers
register on ``DocumentTextExtractor``; only ``text/plain`` ships here.
A content type without a registered decoder is a fatal
``UnsupportedFormatError``.
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from contract_parser.lib.errors import UnsupportedFormatError
from contract_parser.lib.logging_config import get_logger

logger = get_logger(__name__)

TEXT_PLAIN = "text/plain"
APPLICATION_PDF = "application/pdf"
APPLICATION_MSWORD = "application/msword"
APPLICATION_DOCX = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)

Decoder = Callable[[bytes], str]


@runtime_checkable
class TextExtractor(Protocol):
    """Turns document bytes of a given content type into text."""

    def extract_text(self, data: bytes, content_type: str) -> str:
        """Decode document bytes.

        Raises:
            UnsupportedFormatError: If the content type is not supported.
        """
        ...


def decode_plain_text(data: bytes) -> str:
    """Decode UTF-8 text, tolerating a BOM and replacing invalid bytes."""
    return data.decode("utf-8-sig", errors="replace")


def normalize_content_type(content_type: str) -> str:
    """Lower-case a content type and drop parameters such as charset.

    Example:
        >>> normalize_content_type("Text/Plain; charset=utf-8")
        'text/plain'
    """
    return content_type.split(";", 1)[0].strip().lower()


class DocumentTextExtractor:
    """Dispatch document bytes to a decoder registered for the content type.

    Example:
        >>> extractor = DocumentTextExtractor()
        >>> extractor.register(APPLICATION_PDF, my_pdf_decoder)
        >>> text = extractor.extract_text(data, "application/pdf")
    """

    def __init__(self, decoders: dict[str, Decoder] | None = None) -> None:
        """Initialize with the plain-text decoder plus any extra decoders.

        Args:
            decoders: Additional decoders keyed by content type.
        """
        self._decoders: dict[str, Decoder] = {TEXT_PLAIN: decode_plain_text}
        for content_type, decoder in (decoders or {}).items():
            self.register(content_type, decoder)

    @property
    def supported_types(self) -> list[str]:
        """Get the registered content types, sorted."""
        return sorted(self._decoders)

    def register(self, content_type: str, decoder: Decoder) -> None:
        """Register or replace the decoder for a content type."""
        self._decoders[normalize_content_type(content_type)] = decoder

    def extract_text(self, data: bytes, content_type: str) -> str:
        """Decode document bytes with the decoder for ``content_type``.

        Args:
            data: Raw document bytes.
            content_type: MIME type of the document.

        Returns:
            Decoded text.

        Raises:
            UnsupportedFormatError: If no decoder is registered for the type.
        """
        decoder = self._decoders.get(normalize_content_type(content_type))
        if decoder is None:
            raise UnsupportedFormatError(content_type)

        text = decoder(data)
        logger.debug(
            f"Extracted {len(text)} characters from {len(data)} bytes ({content_type})"
        )
        return text
