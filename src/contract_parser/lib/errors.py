"""Custom exception hierarchy for contract parsing operations."""


class ContractParserError(Exception):
    """Base exception for all contract parser errors.

    All parser-specific exceptions inherit from this class, enabling
    centralized exception handling at the service and CLI boundaries.
    """

    pass


class ConfigError(ContractParserError):
    """Exception raised for configuration errors.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class FileNotFoundError(ContractParserError):
    """Exception raised when a configuration or input file is not found.

    Attributes:
        path: Path to the file that was not found
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str) -> None:
        """Initialize FileNotFoundError with path and message.

        Args:
            path: Path to the file that was not found
            message: Descriptive error message, optionally with suggestions
        """
        self.path = path
        self.message = message
        super().__init__(f"File not found: {path}\n{message}")


class UpstreamFetchError(ContractParserError):
    """Raised when document bytes cannot be retrieved from the byte source.

    Fatal for the parse/chunk operation and propagated to the caller.

    Attributes:
        document_id: Identifier of the document being fetched
        status_code: HTTP status code, when the source is HTTP based
        message: Human-readable error message
    """

    def __init__(
        self,
        document_id: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Create an upstream fetch error.

        Args:
            document_id: Identifier of the document being fetched
            message: Descriptive error message
            status_code: Optional HTTP status code returned by the source
        """
        self.document_id = document_id
        self.status_code = status_code
        self.message = message
        status = f" (status {status_code})" if status_code is not None else ""
        super().__init__(
            f"Failed to fetch document '{document_id}'{status}: {message}"
        )


class DocumentNotFoundError(UpstreamFetchError):
    """Raised when the byte source reports that a document does not exist."""

    def __init__(self, document_id: str) -> None:
        """Create a not-found error for a document id."""
        super().__init__(document_id, "Document not found", status_code=404)


class UnsupportedFormatError(ContractParserError):
    """Raised when no text decoder is registered for a content type.

    Attributes:
        content_type: The unrecognized content type
    """

    def __init__(self, content_type: str) -> None:
        """Create an unsupported format error."""
        self.content_type = content_type
        super().__init__(f"Content type {content_type} is not supported")


class TextGenerationError(ContractParserError):
    """Raised when a call to the generative text capability fails.

    Always recovered inside the parsing core; callers of the service
    never observe it.
    """

    pass


class AITimeoutError(TextGenerationError):
    """Raised when a single generation attempt exceeds its timeout.

    Attributes:
        timeout: The timeout in seconds that was exceeded
    """

    def __init__(self, timeout: float) -> None:
        """Create a timeout error for the given limit."""
        self.timeout = timeout
        super().__init__(f"Text generation timed out after {timeout:.1f}s")


class AIUnavailableError(TextGenerationError):
    """Raised when the generative capability is absent or unreachable."""

    pass


class AIMalformedResponseError(ContractParserError):
    """Raised when a generative reply cannot be decoded.

    Attributes:
        raw_response: The reply as received, kept for diagnostics
    """

    def __init__(self, message: str, raw_response: str) -> None:
        """Create a malformed response error.

        Args:
            message: Description of what could not be decoded
            raw_response: The raw reply text
        """
        self.message = message
        self.raw_response = raw_response
        super().__init__(message)
