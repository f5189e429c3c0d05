"""Custom exceptions for docqa.

Defines hierarchy of exceptions for better error handling. Provider failures
are split so callers can tell a transient network problem from a malformed
payload or a missing credential.
"""

from typing import Optional


class DocQAError(Exception):
    """Base exception for docqa.

    All docqa-specific exceptions should inherit from this.
    """

    def __init__(self, message: str, error_code: str = "UNKNOWN_ERROR"):
        """Initialize docqa exception.

        Args:
            message: Error message
            error_code: Error code for programmatic handling
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)

    def __repr__(self) -> str:
        """String representation.

        Returns:
            Exception details
        """
        return f"{self.__class__.__name__}(code={self.error_code}, msg={self.message})"


class ProviderUnavailableError(DocQAError):
    """Raised when an embedding or chat provider cannot be reached.

    Causes:
        - Connection refused or DNS failure
        - Request timeout
        - Non-success HTTP status
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        """Initialize provider unavailable error.

        Args:
            message: Error message
            status_code: HTTP status returned by the provider (if any)
        """
        self.status_code = status_code
        super().__init__(message, "PROVIDER_UNAVAILABLE")


class MalformedResponseError(DocQAError):
    """Raised when a provider returns a payload that cannot be interpreted."""

    def __init__(self, message: str):
        super().__init__(message, "MALFORMED_RESPONSE")


class ConfigurationMissingError(DocQAError):
    """Raised when a required credential or setting is absent.

    Causes:
        - Missing API key
        - Key rejected by the provider (authentication failure)
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        """Initialize configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused error
        """
        self.config_key = config_key
        super().__init__(message, "CONFIGURATION_MISSING")


class EmbeddingProviderError(DocQAError):
    """Raised when an embedding sub-batch failed after all retries.

    The last underlying failure is available as ``last_error`` and is also
    chained as ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        last_error: Optional[BaseException] = None,
        batch_size: Optional[int] = None,
    ):
        """Initialize embedding provider error.

        Args:
            message: Error message
            last_error: Failure of the final attempt
            batch_size: Size of the sub-batch that failed
        """
        self.last_error = last_error
        self.batch_size = batch_size
        super().__init__(message, "EMBEDDING_PROVIDER_ERROR")


class AnswerGenerationError(DocQAError):
    """Raised when the chat-completion call fails; no partial answer exists."""

    def __init__(self, message: str):
        super().__init__(message, "ANSWER_GENERATION_ERROR")


class VectorStoreError(DocQAError):
    """Raised when vector index operations fail.

    Causes:
        - Dimension mismatch
        - Duplicate chunk id
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        """Initialize vector store error.

        Args:
            message: Error message
            operation: Index operation that failed (add, search)
        """
        self.operation = operation
        super().__init__(message, "VECTOR_STORE_ERROR")


class IngestionError(DocQAError):
    """Raised when a document cannot be ingested.

    Causes:
        - No extractable text
        - No chunks produced
        - Unsupported file type
    """

    def __init__(self, message: str, source: Optional[str] = None):
        """Initialize ingestion error.

        Args:
            message: Error message
            source: File name or description of the rejected input
        """
        self.source = source
        super().__init__(message, "INGESTION_ERROR")


class ChunkingError(DocQAError):
    """Raised when text chunking is misconfigured."""

    def __init__(self, message: str):
        super().__init__(message, "CHUNKING_ERROR")


class ValidationError(DocQAError):
    """Raised when input validation fails.

    Causes:
        - Invalid parameter values
        - Missing required fields
        - Type mismatch
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        """Initialize validation error.

        Args:
            message: Error message
            field_name: Field that failed validation
        """
        self.field_name = field_name
        super().__init__(message, "VALIDATION_ERROR")
