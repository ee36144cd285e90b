"""
BatchProcessor drains pending items through report generation.

A run snapshots the items that are Pending when it starts and processes them
one at a time, in submission order: extract text, generate the report, store
the result on the item. A failure is recorded on the failing item and the run
moves on to the next one. Items submitted while a run is active wait for the
next run.

Example usage:
    >>> processor = BatchProcessor(registry, extractor, generator)
    >>> summary = await processor.run()
    >>> print(f"{summary.successful_items}/{summary.total_items} reports")
"""

import logging
import time

from pdf_report_pipeline.clients.extraction_client import TextExtractor
from pdf_report_pipeline.clients.report_client import ReportGenerator
from pdf_report_pipeline.domain.models import (
    BatchSummary,
    GenerationDone,
    GenerationFailed,
    Generating,
    Item,
    ProcessingResult,
)
from pdf_report_pipeline.domain.registry import ItemRegistry
from pdf_report_pipeline.utils.logging import (
    log_completion,
    log_error,
    log_item_start,
    log_item_success,
    log_startup,
)
from pdf_report_pipeline.utils.progress import ProgressBar

TEXT_EXTRACTION_FAILED = "text extraction failed"
UNKNOWN_ERROR = "An unknown error occurred."
EMPTY_REPORT = "The report model returned an empty report."


class BatchProcessor:
    """Sequential report generation over a snapshot of pending items.

    Attributes:
        registry: Item registry; the processor writes generation states.
        extractor: Text extraction collaborator.
        generator: Report generation collaborator.
        show_progress: Whether to draw a progress bar during a run.
    """

    def __init__(
        self,
        registry: ItemRegistry,
        extractor: TextExtractor,
        generator: ReportGenerator,
        show_progress: bool = False,
    ) -> None:
        self.registry = registry
        self.extractor = extractor
        self.generator = generator
        self.show_progress = show_progress
        self.logger = logging.getLogger(__name__)
        self._running = False

    @property
    def is_running(self) -> bool:
        """True while a run is active. Overlapping runs are refused."""
        return self._running

    async def run(self) -> BatchSummary:
        """Process every item that is Pending at invocation time.

        Returns:
            BatchSummary for the snapshot. refused is set when another run was
            already active; an empty summary is returned when nothing was
            pending. Item failures never raise; they are stored on the item.
        """
        if self._running:
            self.logger.warning("A batch run is already in progress")
            return BatchSummary(refused=True)

        snapshot = list(self.registry.select_pending())
        if not snapshot:
            self.logger.info("No pending documents to process")
            return BatchSummary()

        self._running = True
        start_time = time.time()
        results: list[ProcessingResult] = []
        total = len(snapshot)
        try:
            log_startup(self.logger, f"Generating reports for {total} documents")
            with ProgressBar(
                total=total, desc="Generating reports", enabled=self.show_progress
            ) as pbar:
                for index, item in enumerate(snapshot, start=1):
                    pbar.set_postfix({"doc": item.name[:20]})
                    results.append(await self._run_item(item, index, total))
                    pbar.update(1)
        finally:
            self._running = False

        successful = sum(1 for result in results if result.success)
        summary = BatchSummary(
            total_items=total,
            successful_items=successful,
            failed_items=total - successful,
            total_time=time.time() - start_time,
            results=results,
        )
        log_completion(self.logger)
        self.logger.info(
            f"Batch completed in {summary.total_time:.1f}s: "
            f"{summary.successful_items} successful, {summary.failed_items} failed"
        )
        return summary

    async def _run_item(
        self, item: Item, item_number: int, total_items: int
    ) -> ProcessingResult:
        start_time = time.time()
        try:
            return await self._process_item(item, item_number, total_items)
        except Exception as e:
            log_error(self.logger, e, self._context(item, "Batch Processing"))
            return self._fail(item, str(e) or UNKNOWN_ERROR, start_time)

    async def _process_item(
        self, item: Item, item_number: int, total_items: int
    ) -> ProcessingResult:
        """Drive one item through extraction and report generation.

        Raises:
            No exceptions are raised. Collaborator errors end in a Failed
            generation state and an unsuccessful ProcessingResult.
        """
        start_time = time.time()
        log_item_start(self.logger, item.name, item_number, total_items)
        self.registry.update(item.identity, generation=Generating())

        try:
            text = await self.extractor.extract_text(item.source)
        except Exception as e:
            log_error(self.logger, e, self._context(item, "Text Extraction"))
            text = ""

        if not text or not text.strip():
            self.logger.warning(f"No text could be extracted from {item.name}")
            return self._fail(item, TEXT_EXTRACTION_FAILED, start_time)

        try:
            report = await self.generator.generate_report(text, item.name)
        except Exception as e:
            log_error(self.logger, e, self._context(item, "Report Generation"))
            return self._fail(item, str(e) or UNKNOWN_ERROR, start_time)

        if not isinstance(report, str) or not report.strip():
            self.logger.warning(f"Report model returned no report for {item.name}")
            return self._fail(item, EMPTY_REPORT, start_time)

        self.registry.update(item.identity, generation=GenerationDone(report=report))
        log_item_success(self.logger, item.name, len(report))
        return ProcessingResult(
            identity=item.identity,
            name=item.name,
            success=True,
            report_chars=len(report),
            processing_time=time.time() - start_time,
        )

    def _fail(self, item: Item, error: str, start_time: float) -> ProcessingResult:
        self.registry.update(item.identity, generation=GenerationFailed(error=error))
        return ProcessingResult(
            identity=item.identity,
            name=item.name,
            success=False,
            error=error,
            processing_time=time.time() - start_time,
        )

    @staticmethod
    def _context(item: Item, step: str) -> dict:
        return {"identity": item.identity, "item_name": item.name, "step": step}
