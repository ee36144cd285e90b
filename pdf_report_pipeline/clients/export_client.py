"""
Abstract base class for document export implementations.

The exporter publishes a finished report to an external document store. It
needs a valid access token for every call and belongs to the "API client"
subsystem whose asynchronous initialization gates sign-in.
"""

from abc import ABC, abstractmethod

from ..domain.models import ExportedDocument


class DocumentExporter(ABC):
    """Creates remote documents holding generated reports."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the API client (e.g. load its discovery document).

        Raises:
            ExportError: If the client cannot be initialized.
        """
        pass

    @abstractmethod
    async def create_document(
        self, title: str, content: str, access_token: str
    ) -> ExportedDocument:
        """Create a remote document titled title containing content.

        Args:
            title: Title of the new document.
            content: Report body inserted into the document.
            access_token: Bearer token authorizing the call.

        Returns:
            Remote document identifier and address.

        Raises:
            ExportAuthError: If the store rejects the access token.
            ExportError: For any other creation or update failure.
        """
        pass
