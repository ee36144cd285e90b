"""Google Docs export client.

This module publishes generated reports as Google Docs over the Docs REST API
using requests. Each export creates an empty document titled with the source
file name, then inserts the report text at the start of its body.

HTTP calls are blocking and run in a worker thread so the orchestrator's event
loop is never held up by the network.
"""

import asyncio
import logging
from typing import Any

import requests

from ..domain.config import GoogleConfig
from ..domain.models import ExportedDocument
from .exceptions import ExportAuthError, ExportError
from .export_client import DocumentExporter

logger = logging.getLogger(__name__)

DEFAULT_ROOT_URL = "https://docs.googleapis.com/"
DOCUMENT_URL_TEMPLATE = "https://docs.google.com/document/d/{document_id}/edit"
AUTH_ERROR_MESSAGE = "Authentication error. Please sign in again."


class GoogleDocsExporter(DocumentExporter):
    """Client for creating Google Docs through the Docs REST API.

    Example:
        >>> exporter = GoogleDocsExporter(GoogleConfig(api_key="key"))
        >>> await exporter.initialize()
        >>> doc = await exporter.create_document("a.pdf", report, token)
        >>> doc.address
        'https://docs.google.com/document/d/.../edit'
    """

    def __init__(
        self, config: GoogleConfig, session: requests.Session | None = None
    ) -> None:
        """Initialize the exporter.

        Args:
            config: Google configuration (API key, discovery URL, timeout).
            session: Optional requests session, mainly for tests.
        """
        self.config = config
        self._session = session or requests.Session()
        self._root_url = DEFAULT_ROOT_URL
        self._discovery: dict[str, Any] | None = None

    @property
    def initialized(self) -> bool:
        return self._discovery is not None

    async def initialize(self) -> None:
        """Load the Docs API discovery document.

        Raises:
            ExportError: If the discovery document cannot be fetched.
        """
        discovery = await asyncio.to_thread(self._load_discovery)
        self._root_url = discovery.get("rootUrl") or DEFAULT_ROOT_URL
        self._discovery = discovery
        logger.info(
            f"Google Docs API client initialized "
            f"(revision: {discovery.get('revision', 'unknown')})"
        )

    def _load_discovery(self) -> dict[str, Any]:
        params = {"key": self.config.api_key} if self.config.api_key else None
        try:
            response = self._session.get(
                self.config.discovery_url,
                params=params,
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as e:
            error_msg = f"Failed to load Google Docs discovery document: {str(e)}"
            logger.error(error_msg)
            raise ExportError(error_msg, original_exception=e) from e

        if response.status_code != 200:
            error_msg = (
                f"Failed to load Google Docs discovery document: "
                f"{response.status_code} {response.reason}"
            )
            logger.error(error_msg)
            raise ExportError(error_msg, status_code=response.status_code)

        return response.json()

    async def create_document(
        self, title: str, content: str, access_token: str
    ) -> ExportedDocument:
        """Create a Google Doc holding content.

        Args:
            title: Document title.
            content: Report text inserted at the start of the body.
            access_token: OAuth bearer token.

        Returns:
            ExportedDocument with the document id and edit URL.

        Raises:
            ExportAuthError: If Google rejects the token.
            ExportError: If creation or the text insertion fails.
        """
        return await asyncio.to_thread(
            self._create_document_sync, title, content, access_token
        )

    def _create_document_sync(
        self, title: str, content: str, access_token: str
    ) -> ExportedDocument:
        response = self._make_request(
            "POST", "v1/documents", access_token, json={"title": title}
        )
        document_id = response.json().get("documentId")
        if not document_id:
            error_msg = "Failed to get document ID after creation."
            logger.error(error_msg)
            raise ExportError(error_msg)

        self._make_request(
            "POST",
            f"v1/documents/{document_id}:batchUpdate",
            access_token,
            json={
                "requests": [
                    {
                        "insertText": {
                            "text": content,
                            "location": {"index": 1},
                        }
                    }
                ]
            },
        )

        address = DOCUMENT_URL_TEMPLATE.format(document_id=document_id)
        logger.info(f"Created Google Doc '{title}' ({document_id})")
        return ExportedDocument(document_id=document_id, address=address)

    def _make_request(
        self, method: str, endpoint: str, access_token: str, **kwargs
    ) -> requests.Response:
        """Centralized API request handler.

        Args:
            method: HTTP method.
            endpoint: Path relative to the API root URL.
            access_token: OAuth bearer token.
            **kwargs: Additional arguments for requests.Session.request().

        Returns:
            Response object for a successful request.

        Raises:
            ExportAuthError: On 401 or an UNAUTHENTICATED error status.
            ExportError: On any other failure.
        """
        url = f"{self._root_url}{endpoint}"
        kwargs.setdefault("timeout", self.config.request_timeout)
        kwargs.setdefault("headers", {}).update(
            {"Authorization": f"Bearer {access_token}"}
        )

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.RequestException as e:
            error_msg = f"Failed to create Google Doc: {method} {endpoint} - {str(e)}"
            logger.error(error_msg)
            raise ExportError(error_msg, original_exception=e) from e

        logger.debug(f"API request: {method} {endpoint} -> {response.status_code}")

        if self._is_unauthenticated(response):
            logger.error(
                f"Google rejected the access token: "
                f"{response.status_code} {response.reason}"
            )
            raise ExportAuthError(AUTH_ERROR_MESSAGE, status_code=response.status_code)
        if response.status_code >= 400:
            error_msg = (
                f"Failed to create Google Doc: "
                f"{response.status_code} {response.reason}"
            )
            logger.error(error_msg)
            raise ExportError(error_msg, status_code=response.status_code)

        return response

    @staticmethod
    def _is_unauthenticated(response: requests.Response) -> bool:
        """Classify a response as an authentication failure.

        Google reports an expired or revoked token as HTTP 401 and/or an error
        body whose status is UNAUTHENTICATED.
        """
        if response.status_code == 401:
            return True
        if response.status_code < 400:
            return False
        try:
            body = response.json()
        except ValueError:
            return False
        error = body.get("error") if isinstance(body, dict) else None
        return isinstance(error, dict) and error.get("status") == "UNAUTHENTICATED"
