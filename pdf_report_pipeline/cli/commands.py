"""Command implementations for the PDF Report Pipeline CLI.

This module contains the command functions that implement the dry-run and
processing workflows. These commands are called from the main entry point
after configuration validation and client initialization.
"""

import logging
from pathlib import Path

from pdf_report_pipeline.domain.config import AppConfig, StorageConfig
from pdf_report_pipeline.domain.models import (
    BatchSummary,
    ExportOutcome,
    GenerationStatus,
    Item,
)
from pdf_report_pipeline.domain.registry import PDF_SUFFIX
from pdf_report_pipeline.orchestration.session import ReportSession
from pdf_report_pipeline.utils.logging import (
    _supports_unicode,
    log_disk_save,
    log_error_summary,
    log_export_table,
    log_summary_table,
    log_timing_summary,
)


def collect_documents(inputs: list[str], logger: logging.Logger) -> list[Path]:
    """Expand configured inputs into candidate document paths.

    Files are kept in the given order. Directories contribute their direct
    PDF children, sorted by name. Paths that don't exist are passed through so
    the registry can report them.
    """
    paths: list[Path] = []
    for raw in inputs:
        path = Path(raw).expanduser()
        if path.is_dir():
            children = sorted(
                child
                for child in path.iterdir()
                if child.is_file() and child.suffix.lower() == PDF_SUFFIX
            )
            logger.debug(f"Found {len(children)} PDF documents in {path}")
            paths.extend(children)
        else:
            paths.append(path)
    return paths


def dry_run_command(cfg: AppConfig, logger: logging.Logger) -> int:
    """Execute dry-run mode to preview documents without processing.

    Lists the documents that would be admitted to the batch. No Mistral or
    Google service is called.

    Args:
        cfg: Application configuration object
        logger: Logger instance for logging messages

    Returns:
        Exit code: 0 for success
    """
    logger.info("Dry-run mode enabled - previewing documents without processing")
    candidates = collect_documents(cfg.processing.inputs, logger)
    documents = [
        path
        for path in candidates
        if path.suffix.lower() == PDF_SUFFIX and path.is_file()
    ]
    skipped = len(candidates) - len(documents)

    if not documents:
        logger.info("No documents found to process")
        return 0

    logger.info("Preview of documents to be processed:")
    if _supports_unicode():
        logger.info("╔" + "═" * 64 + "╗")
        logger.info(f"║{'Dry-Run Preview':^64}║")
        logger.info("╠" + "═" * 64 + "╣")
        for path in documents:
            size_kb = path.stat().st_size // 1024
            logger.info(f"║ {path.name[:48]:<48} │ {size_kb:>8} KB ║")
        logger.info("╠" + "═" * 64 + "╣")
        logger.info(f"║ Total documents: {len(documents):<45} ║")
        logger.info("╚" + "═" * 64 + "╝")
    else:
        logger.info("=" * 64)
        logger.info(f"{'Dry-Run Preview':^64}")
        logger.info("=" * 64)
        for path in documents:
            size_kb = path.stat().st_size // 1024
            logger.info(f"  {path.name[:48]:<48} | {size_kb:>8} KB")
        logger.info("-" * 64)
        logger.info(f"Total documents: {len(documents)}")
        logger.info("=" * 64)

    if skipped:
        logger.info(f"Skipped {skipped} inputs (missing or not a PDF)")
    return 0


def _determine_exit_code(
    summary: BatchSummary, export_outcomes: list[ExportOutcome] | None = None
) -> int:
    """Determine the appropriate exit code based on the run's outcome.

    Args:
        summary: Batch summary returned by the session
        export_outcomes: Outcomes of the export step, if it ran

    Returns:
        Exit code: 0 for success, 1 for partial failure, 2 for complete failure
    """
    if summary.failed_items == 0:
        code = 0  # Success (no items is not an error)
    elif summary.successful_items > 0:
        code = 1  # Partial failure
    else:
        return 2  # Complete failure

    if export_outcomes and any(
        outcome is not ExportOutcome.EXPORTED for outcome in export_outcomes
    ):
        code = 1
    return code


def _report_path(output_dir: Path, item: Item, taken: set[str]) -> Path:
    """Pick {stem}_report.md, or {stem}_report_N.md when the name is taken."""
    stem = Path(item.name).stem.replace("/", "_").replace("\\", "_")
    file_name = f"{stem}_report.md"
    suffix = 2
    while file_name in taken:
        file_name = f"{stem}_report_{suffix}.md"
        suffix += 1
    taken.add(file_name)
    return output_dir / file_name


def _save_reports(
    items: list[Item], storage: StorageConfig, logger: logging.Logger
) -> None:
    """Write each generated report to {output_dir}/{stem}_report.md.

    Items sharing a file name get a numbered suffix, so no report of this run
    overwrites another.

    Errors are logged as warnings but don't raise exceptions (disk save is
    optional and shouldn't fail the run).
    """
    output_dir = Path(storage.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Failed to create output directory {output_dir}: {e}")
        return

    taken: set[str] = set()
    for item in items:
        if item.report is None:
            continue
        report_path = _report_path(output_dir, item, taken)
        if report_path.name != f"{Path(item.name).stem}_report.md":
            logger.warning(
                f"Another report already uses the name of {item.name}, "
                f"saving as {report_path.name}"
            )
        try:
            report_path.write_text(item.report, encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save report for {item.name}: {e}")
            continue
        log_disk_save(logger, str(report_path))


async def _export_reports(
    session: ReportSession, logger: logging.Logger
) -> list[ExportOutcome]:
    """Sign in and export every generated report, one at a time."""
    generated = [
        item
        for item in session.processed_items()
        if item.generation.status is GenerationStatus.DONE
    ]
    if not generated:
        logger.info("No generated reports to export")
        return []

    if not await session.wait_ready():
        logger.error("Google services could not be initialized, skipping export")
        return [ExportOutcome.FAILED for _ in generated]

    if not await session.sign_in():
        logger.error("Google sign-in was not completed, skipping export")
        return [ExportOutcome.REFUSED_NOT_SIGNED_IN for _ in generated]

    outcomes: list[ExportOutcome] = []
    for item in generated:
        outcome = await session.export_item(item.identity)
        outcomes.append(outcome)
        if outcome is ExportOutcome.FAILED and not session.is_signed_in:
            remaining = len(generated) - len(outcomes)
            if remaining:
                logger.warning(
                    f"Credential was rejected, {remaining} remaining exports refused"
                )
            outcomes.extend([ExportOutcome.REFUSED_NOT_SIGNED_IN] * remaining)
            break

    log_export_table(logger, session.items())
    return outcomes


async def process_command(
    cfg: AppConfig, logger: logging.Logger, session: ReportSession
) -> int:
    """Execute the full processing workflow.

    Submits the configured documents, runs the batch, optionally saves the
    reports to disk and exports them to Google Docs, then displays summary,
    timing and error details.

    Args:
        cfg: Application configuration object
        logger: Logger instance for logging messages
        session: Session wired with initialized collaborators

    Returns:
        Exit code: 0 for success, 1 for partial failure, 2 for complete failure
    """
    logger.info("Starting pipeline execution...")
    if cfg.processing.export:
        # Both Google subsystems initialize while the batch runs.
        session.start()

    added = session.add_items(collect_documents(cfg.processing.inputs, logger))
    logger.info(f"Submitted {len(added)} documents")

    summary = await session.run_batch()

    if cfg.storage.save_reports:
        _save_reports(session.processed_items(), cfg.storage, logger)

    export_outcomes = None
    if cfg.processing.export:
        export_outcomes = await _export_reports(session, logger)
        if session.is_signed_in:
            await session.sign_out()

    log_summary_table(logger, summary)
    log_timing_summary(logger, summary.total_time)
    log_error_summary(logger, summary.results)

    return _determine_exit_code(summary, export_outcomes)
