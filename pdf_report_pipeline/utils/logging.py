"""Logging utilities for the PDF Report Pipeline.

This module provides structured logging functions that integrate with Hydra's
logging system and support unicode/emoji for user-friendly terminal output.
"""

import logging
import os
import sys

from tabulate import tabulate

from pdf_report_pipeline.domain.models import (
    BatchSummary,
    ExportStatus,
    Item,
    ProcessingResult,
)


def _supports_unicode() -> bool:
    """Detect if terminal supports unicode/emoji.

    Checks system encoding and environment variables to determine if the
    terminal can display unicode characters and emoji.

    Returns:
        True if terminal supports unicode, False otherwise
    """
    # Check for explicit ASCII-only mode
    if os.environ.get("FORCE_ASCII") == "1":
        return False

    encoding = getattr(sys.stdout, "encoding", None)
    if encoding is None:
        return False

    unicode_encodings = {"utf-8", "utf-16", "utf-32", "utf-8-sig"}
    return encoding.lower() in unicode_encodings


def _format_with_emoji(message: str, emoji: str, fallback: str) -> str:
    """Format message with emoji or fallback text.

    Args:
        message: The message text to format
        emoji: Unicode emoji character to prepend
        fallback: ASCII fallback text to use if unicode not supported

    Returns:
        Formatted message with emoji or fallback
    """
    if _supports_unicode():
        return f"{emoji} {message}"
    else:
        return f"{fallback} {message}"


def setup_logging() -> logging.Logger:
    """Return the pipeline logger.

    Hydra configures handlers and formatting when @hydra.main() is used, so
    this function only hands back the package logger.

    Example:
        >>> logger = setup_logging()
        >>> logger.info("Pipeline started")
    """
    return logging.getLogger("pdf_report_pipeline")


def log_startup(logger: logging.Logger, message: str) -> None:
    """Log a startup message.

    Example:
        >>> log_startup(logger, "Starting batch of 3 documents")
        # Output: "🚀 Starting batch of 3 documents" or "[START] ..."
    """
    logger.info(_format_with_emoji(message, "🚀", "[START]"))


def log_item_start(
    logger: logging.Logger, item_name: str, item_number: int, total_items: int
) -> None:
    """Log the start of processing an item.

    Args:
        logger: Logger instance to use for logging
        item_name: Name of the document being processed
        item_number: Current item number (1-indexed)
        total_items: Total number of items in the run

    Example:
        >>> log_item_start(logger, "a.pdf", 1, 10)
        # Output: "📄 Processing [1/10]: \"a.pdf\""
    """
    message = f'Processing [{item_number}/{total_items}]: "{item_name}"'
    logger.info(_format_with_emoji(message, "📄", "[*]"))


def log_item_success(logger: logging.Logger, item_name: str, report_chars: int) -> None:
    """Log a generated report.

    Example:
        >>> log_item_success(logger, "a.pdf", 5120)
        # Output: "✓ Report generated for a.pdf (5120 chars)"
    """
    message = f"Report generated for {item_name} ({report_chars} chars)"
    logger.info(_format_with_emoji(message, "✓", "[OK]"))


def log_export_success(logger: logging.Logger, item_name: str, address: str) -> None:
    """Log a successful export with the remote document address."""
    message = f"Exported {item_name}: {address}"
    logger.info(_format_with_emoji(message, "📤", "[EXPORT]"))


def log_credential_change(logger: logging.Logger, signed_in: bool) -> None:
    """Log a sign-in or sign-out."""
    if signed_in:
        logger.info(_format_with_emoji("Signed in to Google", "🔑", "[AUTH]"))
    else:
        logger.info(_format_with_emoji("Signed out of Google", "🔒", "[AUTH]"))


def log_notice(logger: logging.Logger, message: str) -> None:
    """Log a user-facing notice (refused action, pending consent, ...)."""
    logger.warning(_format_with_emoji(message, "⚠️", "[NOTICE]"))


def log_disk_save(logger: logging.Logger, path: str) -> None:
    """Log disk save operation.

    Example:
        >>> log_disk_save(logger, "/path/to/a_report.md")
        # Output: "💾 Saved to disk: /path/to/a_report.md"
    """
    logger.info(_format_with_emoji(f"Saved to disk: {path}", "💾", "[SAVE]"))


def log_completion(logger: logging.Logger) -> None:
    """Log batch completion."""
    logger.info(_format_with_emoji("Batch completed", "✅", "[DONE]"))


def log_error(logger: logging.Logger, error: Exception, context: dict) -> None:
    """Log an error with structured context information.

    Args:
        logger: Logger instance to use for logging
        error: Exception that was raised
        context: Dictionary containing context information such as:
            - identity: Item identity
            - item_name: Name of the document being processed
            - step: Processing step where error occurred

    Example:
        >>> context = {"identity": "a.pdf-1-1", "item_name": "a.pdf",
        ...            "step": "Extraction"}
        >>> log_error(logger, ValueError("Invalid format"), context)
        # Output: "❌ Error processing \"a.pdf\" (a.pdf-1-1)\\n   Step:
        # Extraction\\n   Error: ValueError: Invalid format"
    """
    item_name = context.get("item_name", "Unknown")
    identity = context.get("identity", "Unknown")
    step = context.get("step", "Unknown")
    error_type = type(error).__name__
    error_message = str(error)

    if _supports_unicode():
        header = f'❌ Error processing "{item_name}" ({identity})'
    else:
        header = f'[ERROR] Error processing "{item_name}" ({identity})'

    message = f"{header}\n   Step: {step}\n   Error: {error_type}: {error_message}"

    logger.error(message)
    # Include full traceback only when in an active exception context
    if sys.exc_info()[0] is not None:
        logger.debug("Full traceback:", exc_info=True)


def _truncate(name: str, limit: int = 40) -> str:
    return name[:limit] + "..." if len(name) > limit else name


def log_summary_table(logger: logging.Logger, summary: BatchSummary) -> None:
    """Log a per-item summary table for a batch run.

    Args:
        logger: Logger instance to use for logging
        summary: Summary returned by the batch processor
    """
    table_data = []
    for result in summary.results:
        status = "Done" if result.success else "Failed"
        table_data.append(
            [
                _truncate(result.name),
                status,
                result.report_chars,
                f"{result.processing_time:.1f}s",
            ]
        )

    tablefmt = "grid" if _supports_unicode() else "simple"

    if table_data:
        headers = ["Document", "Status", "Report chars", "Time"]
        table_str = tabulate(table_data, headers=headers, tablefmt=tablefmt)
        logger.info("")
        logger.info("Summary:")
        logger.info(table_str)
    else:
        logger.info("Summary: No documents were processed")

    if summary.failed_items > 0:
        logger.info("")
        logger.info(f"Failed items: {summary.failed_items}")


def log_export_table(logger: logging.Logger, items: list[Item]) -> None:
    """Log the export state of every generated report."""
    table_data = []
    for item in items:
        if item.export.status is ExportStatus.NOT_STARTED:
            continue
        detail = item.export_address or item.export_error or ""
        table_data.append([_truncate(item.name), item.export.status.value, detail])

    if not table_data:
        return

    tablefmt = "grid" if _supports_unicode() else "simple"
    table_str = tabulate(
        table_data, headers=["Document", "Export", "Detail"], tablefmt=tablefmt
    )
    logger.info("")
    logger.info(_format_with_emoji("Export Summary:", "📤", "[EXPORT]"))
    logger.info(table_str)


def log_timing_summary(logger: logging.Logger, total_time: float) -> None:
    """Log total execution time in a human-readable format.

    Example:
        >>> log_timing_summary(logger, 195.5)
        # Output: "⏱️ Total time: 3m 15s" or "[TIME] Total time: 3m 15s"
    """
    minutes = int(total_time // 60)
    seconds = int(total_time % 60)

    time_str = f"{minutes}m {seconds}s" if minutes > 0 else f"{seconds}s"

    logger.info("")
    logger.info(_format_with_emoji(f"Total time: {time_str}", "⏱️", "[TIME]"))


def get_error_suggestion(error_message: str) -> str:
    """Get actionable suggestion based on error message pattern.

    Args:
        error_message: Error message string to analyze

    Returns:
        Actionable suggestion string based on error pattern

    Example:
        >>> get_error_suggestion("Mistral API rate limit exceeded (429)")
        'Wait 60 seconds and retry, or submit fewer documents'
    """
    error_lower = error_message.lower()

    if "rate limit" in error_lower or "429" in error_lower:
        return "Wait 60 seconds and retry, or submit fewer documents"
    elif (
        "network" in error_lower
        or "connection" in error_lower
        or "timeout" in error_lower
    ):
        return "Check internet connection and retry"
    elif "text extraction failed" in error_lower:
        return "Verify the PDF is not scanned blank, corrupted or password-protected"
    elif "api_key" in error_lower or "api key" in error_lower:
        return "Set MISTRAL_API_KEY and retry"
    elif (
        "authentication" in error_lower or "401" in error_lower or "403" in error_lower
    ):
        return "Sign in again and retry the export"
    else:
        return "Review error details and check logs for more information"


def log_error_summary(logger: logging.Logger, results: list[ProcessingResult]) -> None:
    """Log detailed error summary with suggestions for failed items.

    Args:
        logger: Logger instance to use for logging
        results: Per-item results from a batch run
    """
    failed_results = [result for result in results if not result.success]

    if not failed_results:
        return

    failed_count = len(failed_results)
    header = _format_with_emoji(
        f"Errors ({failed_count} items failed):", "❌", "[ERRORS]"
    )

    logger.info("")
    logger.info(header)
    logger.info("")

    for idx, result in enumerate(failed_results, start=1):
        logger.info(f'{idx}. "{result.name}" ({result.identity})')
        error = result.error or "Unknown error"
        logger.info(f"   Error: {error}")
        logger.info(f"   → Suggestion: {get_error_suggestion(error)}")
        logger.info("")

    logger.info("To retry failed documents, submit them again in a new run.")
