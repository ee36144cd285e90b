"""
Abstract base class for text extraction implementations.

Example workflow:
    # text = await extractor.extract_text(item.source)
    # if not text: the document yielded no usable text

Implementations handle provider-specific details internally (uploads, signed
URLs, page parsing) and expose plain text through this interface.
"""

from abc import ABC, abstractmethod

from ..domain.models import DocumentSource


class TextExtractor(ABC):
    """Converts a submitted document into plain text."""

    @abstractmethod
    async def extract_text(self, source: DocumentSource) -> str:
        """Extract the document's text.

        Args:
            source: Handle on the submitted document.

        Returns:
            Plain text of the document. An empty string means the document
            holds no extractable text.

        Raises:
            ExtractionError: If the document cannot be read or processed.
        """
        pass
