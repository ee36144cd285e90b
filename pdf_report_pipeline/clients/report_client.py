"""
Abstract base class for report generation implementations.
"""

from abc import ABC, abstractmethod


class ReportGenerator(ABC):
    """Turns extracted document text into a structured report."""

    @abstractmethod
    async def generate_report(self, document_text: str, file_name: str) -> str:
        """Generate a structured report.

        Args:
            document_text: Plain text extracted from the document.
            file_name: Display name of the document, used as a hint in the
                report and as its source reference.

        Returns:
            Report text (markdown).

        Raises:
            ReportGenerationError: If the model call fails or returns no text.
        """
        pass
