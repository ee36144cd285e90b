"""
ExportProcessor publishes one generated report to the document store.

An export is only attempted for an item whose report is generated and only
while the credential is valid; otherwise the request is refused without
touching any state. A failure classified as an authentication error also
clears the credential, so the next attempt requires signing in again. There is
no automatic retry.
"""

import logging

from pdf_report_pipeline.clients.exceptions import ExportAuthError
from pdf_report_pipeline.clients.export_client import DocumentExporter
from pdf_report_pipeline.domain.models import (
    ExportDone,
    ExportFailed,
    ExportInProgress,
    ExportOutcome,
    GenerationDone,
)
from pdf_report_pipeline.domain.registry import ItemRegistry
from pdf_report_pipeline.orchestration.credentials import CredentialManager
from pdf_report_pipeline.utils.logging import log_error, log_export_success

UNKNOWN_ERROR = "An unknown error occurred."


class ExportProcessor:
    """Drives a single item through the export state machine."""

    def __init__(
        self,
        registry: ItemRegistry,
        exporter: DocumentExporter,
        credentials: CredentialManager,
    ) -> None:
        self.registry = registry
        self.exporter = exporter
        self.credentials = credentials
        self.logger = logging.getLogger(__name__)

    async def export_item(self, identity: str) -> ExportOutcome:
        """Export the report of the item matching identity.

        Args:
            identity: Identity of a registered item.

        Returns:
            EXPORTED or FAILED when an export was attempted, or one of the
            REFUSED_* outcomes when a precondition did not hold (no state
            change in that case).
        """
        item = self.registry.get(identity)
        if item is None:
            return ExportOutcome.REFUSED_UNKNOWN_ITEM
        if not isinstance(item.generation, GenerationDone):
            return ExportOutcome.REFUSED_NOT_GENERATED
        if isinstance(item.export, ExportInProgress):
            return ExportOutcome.REFUSED_IN_PROGRESS

        token = self.credentials.current_token()
        if token is None:
            return ExportOutcome.REFUSED_NOT_SIGNED_IN

        self.registry.update(identity, export=ExportInProgress())
        self.logger.info(f"Creating Google Doc for {item.name}")

        try:
            document = await self.exporter.create_document(
                item.name, item.generation.report, token
            )
        except ExportAuthError as e:
            log_error(self.logger, e, self._context(item))
            self.registry.update(identity, export=ExportFailed(error=str(e)))
            self.credentials.invalidate()
            return ExportOutcome.FAILED
        except Exception as e:
            log_error(self.logger, e, self._context(item))
            self.registry.update(
                identity, export=ExportFailed(error=str(e) or UNKNOWN_ERROR)
            )
            return ExportOutcome.FAILED

        done = ExportDone(document_id=document.document_id, address=document.address)
        self.registry.update(identity, export=done)
        log_export_success(self.logger, item.name, document.address)
        return ExportOutcome.EXPORTED

    @staticmethod
    def _context(item) -> dict:
        return {"identity": item.identity, "item_name": item.name, "step": "Export"}
