"""
ReportSession: the single entry point a display layer talks to.

The session owns the item registry and the credential manager and wires the
batch and export orchestrators around them. Callers get exactly five actions
(add_items, run_batch, export_item, sign_in, sign_out) plus read-only views of
the registry. Nothing here raises past its own boundary; outcomes come back as
values and failures are stored on the items.

Example usage:
    >>> session = ReportSession(extractor, generator, exporter, consent)
    >>> session.start()
    >>> session.add_items(["a.pdf", "b.pdf"])
    >>> summary = await session.run_batch()
    >>> await session.wait_ready()
    >>> await session.sign_in()
    >>> outcome = await session.export_item(session.items()[0].identity)
"""

from collections.abc import Callable, Iterable
import logging
from pathlib import Path

from pdf_report_pipeline.clients.consent_client import ConsentProvider
from pdf_report_pipeline.clients.exceptions import NotReadyError
from pdf_report_pipeline.clients.export_client import DocumentExporter
from pdf_report_pipeline.clients.extraction_client import TextExtractor
from pdf_report_pipeline.clients.report_client import ReportGenerator
from pdf_report_pipeline.domain.models import (
    BatchSummary,
    CredentialState,
    ExportOutcome,
    Item,
)
from pdf_report_pipeline.domain.registry import ItemObserver, ItemRegistry
from pdf_report_pipeline.orchestration.batch import BatchProcessor
from pdf_report_pipeline.orchestration.credentials import CredentialManager
from pdf_report_pipeline.orchestration.export import ExportProcessor
from pdf_report_pipeline.utils.logging import log_notice

Notifier = Callable[[str], None]


class ReportSession:
    """Facade over the registry, credential state and both orchestrators.

    Args:
        extractor: Text extraction collaborator.
        generator: Report generation collaborator.
        exporter: Document export collaborator. Its initialize() is one of the
            two readiness conditions for signing in.
        consent_provider: Credential grant/revoke collaborator. Its
            initialize() is the other readiness condition.
        show_progress: Draw a progress bar during batch runs.
        notifier: Receives user-facing notices (refused sign-in/out). Defaults
            to a warning on the session logger.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        generator: ReportGenerator,
        exporter: DocumentExporter,
        consent_provider: ConsentProvider,
        *,
        show_progress: bool = False,
        notifier: Notifier | None = None,
    ) -> None:
        self.logger = logging.getLogger(__name__)
        self._exporter = exporter
        self._consent_provider = consent_provider
        self._registry = ItemRegistry()
        self._credentials = CredentialManager(consent_provider)
        self._batch = BatchProcessor(
            self._registry, extractor, generator, show_progress=show_progress
        )
        self._export = ExportProcessor(self._registry, exporter, self._credentials)
        self._notifier = notifier or self._log_notice
        self._started = False

    def start(self) -> None:
        """Kick off both subsystem initializations in the background.

        Must be called from a running event loop. Calling it again is a no-op.
        """
        if self._started:
            return
        self._started = True
        self._credentials.attach_readiness(
            self._exporter.initialize(), self._consent_provider.initialize()
        )

    async def wait_ready(self) -> bool:
        """Start if needed and wait until both initializations settle."""
        self.start()
        return await self._credentials.wait_ready()

    # Actions

    def add_items(self, paths: Iterable[Path | str]) -> list[Item]:
        """Register documents as Pending items, after all existing ones."""
        return self._registry.add_documents(paths)

    async def run_batch(self) -> BatchSummary:
        """Generate reports for every item Pending right now."""
        return await self._batch.run()

    async def export_item(self, identity: str) -> ExportOutcome:
        """Export one generated report. Refusals leave all state unchanged."""
        outcome = await self._export.export_item(identity)
        if outcome.refused:
            self.logger.info(f"Export of {identity} {outcome.value}")
        return outcome

    async def sign_in(self) -> bool:
        """Run the consent flow. Returns True when a credential is held."""
        try:
            return await self._credentials.request_grant()
        except NotReadyError as e:
            self._notifier(e.message)
            return False

    async def sign_out(self) -> bool:
        """Revoke the held credential. Returns True if one was revoked."""
        try:
            return await self._credentials.revoke()
        except NotReadyError as e:
            self._notifier(e.message)
            return False

    # Read-only views

    def items(self) -> list[Item]:
        return self._registry.items()

    def get(self, identity: str) -> Item | None:
        return self._registry.get(identity)

    def pending_items(self) -> list[Item]:
        return list(self._registry.select_pending())

    def processed_items(self) -> list[Item]:
        """Items that have left Pending, in submission order."""
        return list(self._registry.select_processed())

    @property
    def is_processing(self) -> bool:
        return self._batch.is_running

    @property
    def is_ready(self) -> bool:
        return self._credentials.ready

    @property
    def is_signed_in(self) -> bool:
        return self._credentials.is_valid()

    @property
    def credential_state(self) -> CredentialState:
        return self._credentials.state

    def on_item_change(self, observer: ItemObserver) -> None:
        """Call observer with the new record after every item change."""
        self._registry.subscribe(observer)

    def on_credential_change(
        self, observer: Callable[[CredentialState], None]
    ) -> None:
        self._credentials.subscribe(observer)

    def _log_notice(self, message: str) -> None:
        log_notice(self.logger, message)
