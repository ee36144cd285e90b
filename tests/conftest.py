"""Pytest configuration and in-memory collaborators for the pipeline tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pdf_report_pipeline.clients.consent_client import ConsentProvider
from pdf_report_pipeline.clients.exceptions import ConsentDeniedError
from pdf_report_pipeline.clients.export_client import DocumentExporter
from pdf_report_pipeline.clients.extraction_client import TextExtractor
from pdf_report_pipeline.clients.report_client import ReportGenerator
from pdf_report_pipeline.domain.models import DocumentSource, ExportedDocument


class FakeExtractor(TextExtractor):
    """Returns canned text per document name, or raises a canned error."""

    def __init__(
        self,
        texts: dict[str, str | Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.texts = texts or {}
        self.delays = delays or {}
        self.calls: list[str] = []

    async def extract_text(self, source: DocumentSource) -> str:
        self.calls.append(source.name)
        await asyncio.sleep(self.delays.get(source.name, 0))
        result = self.texts.get(source.name, f"text of {source.name}")
        if isinstance(result, Exception):
            raise result
        return result


class FakeGenerator(ReportGenerator):
    """Builds a report from the text, or raises a canned error per name."""

    def __init__(
        self,
        errors: dict[str, Exception] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.errors = errors or {}
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []
        self.completed: list[str] = []

    async def generate_report(self, document_text: str, file_name: str) -> str:
        self.calls.append((document_text, file_name))
        await asyncio.sleep(self.delays.get(file_name, 0))
        if file_name in self.errors:
            raise self.errors[file_name]
        self.completed.append(file_name)
        return f"# Report for {file_name}\n\n{document_text}"


class FakeExporter(DocumentExporter):
    """Creates documents in memory; errors are queued per call."""

    def __init__(
        self,
        errors: list[Exception | None] | None = None,
        init_error: Exception | None = None,
        init_delay: float = 0,
    ) -> None:
        self.errors = list(errors or [])
        self.init_error = init_error
        self.init_delay = init_delay
        self.initialized = False
        self.created: list[tuple[str, str, str]] = []

    async def initialize(self) -> None:
        await asyncio.sleep(self.init_delay)
        if self.init_error is not None:
            raise self.init_error
        self.initialized = True

    async def create_document(
        self, title: str, content: str, access_token: str
    ) -> ExportedDocument:
        error = self.errors.pop(0) if self.errors else None
        if error is not None:
            raise error
        self.created.append((title, content, access_token))
        document_id = f"doc-{len(self.created)}"
        return ExportedDocument(
            document_id=document_id,
            address=f"https://docs.google.com/document/d/{document_id}/edit",
        )


class FakeConsentProvider(ConsentProvider):
    """Grants a fixed token, or denies when told to."""

    def __init__(
        self,
        token: str = "token-123",
        deny: bool = False,
        init_error: Exception | None = None,
        init_delay: float = 0,
    ) -> None:
        self.token = token
        self.deny = deny
        self.init_error = init_error
        self.init_delay = init_delay
        self.requests = 0
        self.revoked: list[str] = []

    async def initialize(self) -> None:
        await asyncio.sleep(self.init_delay)
        if self.init_error is not None:
            raise self.init_error

    async def request_token(self) -> str:
        self.requests += 1
        if self.deny:
            raise ConsentDeniedError("Consent not granted: access_denied")
        return self.token

    async def revoke_token(self, token: str) -> None:
        self.revoked.append(token)


@pytest.fixture
def make_pdf(tmp_path: Path):
    """Create a small PDF file under tmp_path and return its path."""

    def _make(name: str, content: bytes = b"%PDF-1.4\n%test\n") -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _make


@pytest.fixture
def extractor() -> FakeExtractor:
    return FakeExtractor()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def exporter() -> FakeExporter:
    return FakeExporter()


@pytest.fixture
def consent() -> FakeConsentProvider:
    return FakeConsentProvider()
