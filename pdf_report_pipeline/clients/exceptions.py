"""
Custom exception classes for collaborator operations (Mistral and Google).

This module defines domain-specific exceptions that provide clear error context
for API interactions, making error handling and debugging easier in the
orchestration layer.

Exception Hierarchy:
- PipelineClientError (base for all collaborator errors)
  ├── ExtractionError
  ├── ReportGenerationError
  ├── ExportError
  │   └── ExportAuthError
  └── CredentialError
      ├── ConsentDeniedError
      └── NotReadyError
"""


class PipelineClientError(Exception):
    """Base exception for all collaborator errors.

    All collaborator-specific exceptions inherit from this class, allowing for
    broad exception catching when needed while maintaining specific error types
    for precise error handling.
    """

    def __init__(self, message: str, original_exception: Exception | None = None):
        """Initialize the exception.

        Args:
            message: Human-readable error message describing what went wrong.
            original_exception: Optional original exception that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception

    def __str__(self) -> str:
        """Return string representation with context."""
        if self.original_exception:
            orig_type = type(self.original_exception).__name__
            orig_msg = str(self.original_exception)
            return f"{self.message} (Original: {orig_type}: {orig_msg})"
        return self.message


class ExtractionError(PipelineClientError):
    """Exception raised when a document's text cannot be extracted.

    This exception is raised when the source is unreadable or unsupported, or
    when the OCR service fails to process it.
    """

    pass


class ReportGenerationError(PipelineClientError):
    """Exception raised when the report model fails to produce a report.

    This exception covers missing API keys, quota and rate limits, malformed
    input and network failures during chat completion.
    """

    pass


class ExportError(PipelineClientError):
    """Exception raised when creating or filling the remote document fails."""

    def __init__(
        self,
        message: str,
        original_exception: Exception | None = None,
        status_code: int | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message describing what went wrong.
            original_exception: Optional original exception that caused this error.
            status_code: HTTP status code returned by the document store, if any.
        """
        super().__init__(message, original_exception)
        self.status_code = status_code


class ExportAuthError(ExportError):
    """Exception raised when the document store rejects the credential.

    Raised on 401 Unauthorized or an error body whose status is
    UNAUTHENTICATED. The export orchestrator revokes the held credential when
    it sees this error, so the next attempt requires signing in again.
    """

    pass


class CredentialError(PipelineClientError):
    """Base exception for credential grant and revocation failures."""

    pass


class ConsentDeniedError(CredentialError):
    """Exception raised when the user declines consent or the grant expires."""

    pass


class NotReadyError(CredentialError):
    """Exception raised when sign-in or sign-out is requested before the API
    client and identity subsystems have both finished initializing."""

    pass
