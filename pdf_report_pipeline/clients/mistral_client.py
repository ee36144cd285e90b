"""Mistral AI client implementations for extraction and report generation.

This module provides the two generation-stage collaborators:

- MistralTextExtractor uploads a PDF to the Mistral Files API, obtains a
  signed URL and runs Mistral OCR, joining the non-blank pages into text.
- MistralReportGenerator sends the structured report prompt to a Mistral chat
  model and returns the completion text.

Both use the SDK's async methods so the orchestrator's event loop stays free
while a request is in flight.
"""

import asyncio
import logging

from mistralai import Mistral, MistralError

from ..domain.config import MistralConfig
from ..domain.models import DocumentSource
from ..domain.prompt import build_report_prompt
from .exceptions import ExtractionError, ReportGenerationError
from .extraction_client import TextExtractor
from .report_client import ReportGenerator

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


class MistralTextExtractor(TextExtractor):
    """Extracts document text with Mistral OCR.

    Follows the upload-then-process pattern: the PDF is uploaded once, OCR
    runs against a signed URL, and the uploaded file is deleted afterwards.

    Example:
        >>> config = MistralConfig(api_key="your-key")
        >>> extractor = MistralTextExtractor(config)
        >>> text = await extractor.extract_text(source)
    """

    def __init__(self, config: MistralConfig, client: Mistral | None = None) -> None:
        """Initialize the extractor.

        Args:
            config: Mistral configuration containing API key and model settings.
            client: Optional preconfigured SDK client. Built from config when
                omitted.

        Raises:
            ExtractionError: If client initialization fails.
        """
        self.config = config
        try:
            self.client = client or Mistral(api_key=config.api_key)
        except Exception as e:
            error_msg = f"Failed to initialize Mistral client: {str(e)}"
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e

    async def extract_text(self, source: DocumentSource) -> str:
        """Extract the text of a PDF through Mistral OCR.

        Args:
            source: Handle on the submitted document.

        Returns:
            Markdown text of every non-blank page, joined by blank lines.
            Empty when no page holds content.

        Raises:
            ExtractionError: If reading, upload or OCR processing fails.
        """
        try:
            pdf_bytes = await asyncio.to_thread(source.path.read_bytes)
        except OSError as e:
            error_msg = f"Failed to read document '{source.name}': {str(e)}"
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e

        file_id = await self._upload(pdf_bytes, source.name)
        try:
            return await self._process(file_id, source.name)
        finally:
            await self._cleanup(file_id)

    async def _upload(self, pdf_bytes: bytes, filename: str) -> str:
        """Upload the PDF and return its file id."""
        try:
            logger.info(f"Uploading PDF file: {filename}")
            uploaded = await self.client.files.upload_async(
                file={"file_name": filename, "content": pdf_bytes},
                purpose="ocr",
            )
            logger.debug(f"Uploaded {filename} (file_id: {uploaded.id})")
            return uploaded.id
        except MistralError as e:
            error_msg = f"Failed to upload PDF file '{filename}': {str(e)}"
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e
        except Exception as e:
            error_msg = f"Unexpected error uploading PDF file '{filename}': {str(e)}"
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e

    async def _process(self, file_id: str, filename: str) -> str:
        """Run OCR on an uploaded file and join its non-blank pages."""
        try:
            signed = await self.client.files.get_signed_url_async(file_id=file_id)
            logger.info(
                f"Processing PDF via OCR API "
                f"(model: {self.config.ocr_model}, file: {filename})"
            )
            ocr_response = await self.client.ocr.process_async(
                model=self.config.ocr_model,
                document={"type": "document_url", "document_url": signed.url},
            )
        except MistralError as e:
            error_msg = f"Failed to process PDF '{filename}' via OCR API: {str(e)}"
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e
        except Exception as e:
            error_msg = (
                f"Unexpected error processing PDF '{filename}' via OCR API: {str(e)}"
            )
            logger.error(error_msg)
            raise ExtractionError(error_msg, original_exception=e) from e

        pages = [page.markdown or "" for page in ocr_response.pages]
        kept = [
            markdown.strip()
            for markdown in pages
            if not self._is_empty_page(markdown)
        ]
        logger.info(
            f"OCR complete for {filename}: {len(pages)} pages "
            f"({len(kept)} with content, {len(pages) - len(kept)} empty skipped)"
        )
        return PAGE_SEPARATOR.join(kept)

    async def _cleanup(self, file_id: str) -> None:
        """Delete the uploaded file. Failures are logged, not raised."""
        try:
            await self.client.files.delete_async(file_id=file_id)
            logger.debug(f"Deleted uploaded file: {file_id}")
        except Exception as e:
            logger.warning(f"Failed to delete file {file_id}: {str(e)}")

    def _is_empty_page(self, markdown: str) -> bool:
        """Return True for whitespace-only pages, or pages whose stripped
        markdown is below the configured content threshold."""
        content = markdown.strip()
        return not content or len(content) < self.config.empty_page_threshold


class MistralReportGenerator(ReportGenerator):
    """Generates structured reports with a Mistral chat model.

    Example:
        >>> generator = MistralReportGenerator(MistralConfig(api_key="your-key"))
        >>> report = await generator.generate_report(text, "a.pdf")
    """

    def __init__(self, config: MistralConfig, client: Mistral | None = None) -> None:
        self.config = config
        try:
            self.client = client or Mistral(api_key=config.api_key)
        except Exception as e:
            error_msg = f"Failed to initialize Mistral client: {str(e)}"
            logger.error(error_msg)
            raise ReportGenerationError(error_msg, original_exception=e) from e

    async def generate_report(self, document_text: str, file_name: str) -> str:
        """Generate a report for one document.

        Args:
            document_text: Plain text extracted from the document.
            file_name: Document name used in the prompt.

        Returns:
            Report text returned by the model.

        Raises:
            ReportGenerationError: If the API key is missing, the call fails or
                the model returns no text.
        """
        if not self.config.api_key:
            raise ReportGenerationError(
                "MISTRAL_API_KEY environment variable not set."
            )

        prompt = build_report_prompt(document_text, file_name)
        try:
            logger.info(
                f"Generating report for {file_name} "
                f"(model: {self.config.report_model}, {len(document_text)} chars)"
            )
            response = await self.client.chat.complete_async(
                model=self.config.report_model,
                messages=[{"role": "user", "content": prompt}],
            )
        except MistralError as e:
            error_msg = f"Failed to generate report for '{file_name}': {str(e)}"
            logger.error(error_msg)
            raise ReportGenerationError(error_msg, original_exception=e) from e
        except Exception as e:
            error_msg = (
                f"Unexpected error generating report for '{file_name}': {str(e)}"
            )
            logger.error(error_msg)
            raise ReportGenerationError(error_msg, original_exception=e) from e

        report = self._message_text(response)
        if not report.strip():
            raise ReportGenerationError(
                f"Report model returned an empty response for '{file_name}'"
            )
        return report

    @staticmethod
    def _message_text(response) -> str:
        """Extract the first choice's text from a chat completion response.

        Content may be a plain string or a list of content chunks; only text
        chunks are kept.
        """
        if response is None or not response.choices:
            return ""
        content = response.choices[0].message.content
        if content is None:
            return ""
        if isinstance(content, str):
            return content
        return "".join(getattr(chunk, "text", "") or "" for chunk in content)
