"""Tests for the CLI commands and their summary output."""

import logging

import pytest
from conftest import FakeConsentProvider, FakeExporter, FakeExtractor, FakeGenerator

from pdf_report_pipeline.cli.commands import (
    _determine_exit_code,
    _export_reports,
    collect_documents,
    dry_run_command,
    process_command,
)
from pdf_report_pipeline.clients.exceptions import ExportAuthError, ExtractionError
from pdf_report_pipeline.domain.config import (
    AppConfig,
    GoogleConfig,
    MistralConfig,
    ProcessingConfig,
    StorageConfig,
)
from pdf_report_pipeline.domain.models import BatchSummary, ExportOutcome
from pdf_report_pipeline.orchestration.session import ReportSession
from pdf_report_pipeline.utils.logging import get_error_suggestion

logger = logging.getLogger("pdf_report_pipeline.tests")


def _config(inputs, tmp_path, export=False, save_reports=False) -> AppConfig:
    return AppConfig(
        mistral=MistralConfig(api_key="k"),
        google=GoogleConfig(client_id="client"),
        processing=ProcessingConfig(
            inputs=[str(path) for path in inputs],
            export=export,
            show_progress=False,
        ),
        storage=StorageConfig(
            save_reports=save_reports, output_dir=str(tmp_path / "reports")
        ),
    )


def _session(extractor=None, consent=None, exporter=None) -> ReportSession:
    return ReportSession(
        extractor or FakeExtractor(),
        FakeGenerator(),
        exporter or FakeExporter(),
        consent or FakeConsentProvider(),
    )


def test_collect_documents_expands_directories(make_pdf, tmp_path) -> None:
    folder = tmp_path / "papers"
    folder.mkdir()
    (folder / "b.pdf").write_bytes(b"%PDF")
    (folder / "a.pdf").write_bytes(b"%PDF")
    (folder / "notes.txt").write_text("x")
    single = make_pdf("single.pdf")

    paths = collect_documents([str(single), str(folder)], logger)

    assert [path.name for path in paths] == ["single.pdf", "a.pdf", "b.pdf"]


def test_dry_run_lists_documents_without_services(make_pdf, tmp_path) -> None:
    cfg = _config([make_pdf("a.pdf"), tmp_path / "missing.pdf"], tmp_path)

    assert dry_run_command(cfg, logger) == 0


@pytest.mark.asyncio
async def test_process_saves_reports_to_disk(make_pdf, tmp_path) -> None:
    cfg = _config([make_pdf("a.pdf")], tmp_path, save_reports=True)

    code = await process_command(cfg, logger, _session())

    assert code == 0
    saved = tmp_path / "reports" / "a_report.md"
    assert saved.read_text(encoding="utf-8").startswith("# Report for a.pdf")


@pytest.mark.asyncio
async def test_process_partial_failure_exit_code(make_pdf, tmp_path) -> None:
    cfg = _config([make_pdf("a.pdf"), make_pdf("b.pdf")], tmp_path)
    extractor = FakeExtractor(texts={"b.pdf": ExtractionError("corrupted")})

    assert await process_command(cfg, logger, _session(extractor)) == 1


@pytest.mark.asyncio
async def test_process_exports_and_signs_out(make_pdf, tmp_path) -> None:
    cfg = _config([make_pdf("a.pdf"), make_pdf("b.pdf")], tmp_path, export=True)
    consent = FakeConsentProvider()
    exporter = FakeExporter()
    session = _session(consent=consent, exporter=exporter)

    code = await process_command(cfg, logger, session)

    assert code == 0
    assert [title for title, _, _ in exporter.created] == ["a.pdf", "b.pdf"]
    assert all(item.export_address for item in session.items())
    assert session.is_signed_in is False


@pytest.mark.asyncio
async def test_process_export_refused_when_consent_denied(make_pdf, tmp_path) -> None:
    cfg = _config([make_pdf("a.pdf")], tmp_path, export=True)
    exporter = FakeExporter()
    session = _session(consent=FakeConsentProvider(deny=True), exporter=exporter)

    assert await process_command(cfg, logger, session) == 1
    assert exporter.created == []


class _NumberingExtractor(FakeExtractor):
    async def extract_text(self, source) -> str:
        text = await super().extract_text(source)
        return f"{text} #{len(self.calls)}"


@pytest.mark.asyncio
async def test_reports_with_the_same_file_name_are_all_saved(tmp_path) -> None:
    first, second = tmp_path / "2023", tmp_path / "2024"
    for folder in (first, second):
        folder.mkdir()
        (folder / "a.pdf").write_bytes(b"%PDF")
    cfg = _config([first / "a.pdf", second / "a.pdf"], tmp_path, save_reports=True)

    code = await process_command(cfg, logger, _session(_NumberingExtractor()))

    assert code == 0
    reports = tmp_path / "reports"
    assert sorted(path.name for path in reports.iterdir()) == [
        "a_report.md",
        "a_report_2.md",
    ]
    assert (reports / "a_report.md").read_text(encoding="utf-8").endswith("#1")
    assert (reports / "a_report_2.md").read_text(encoding="utf-8").endswith("#2")


@pytest.mark.asyncio
async def test_rejected_credential_stops_remaining_exports(make_pdf) -> None:
    exporter = FakeExporter(
        errors=[ExportAuthError("Authentication error. Please sign in again.")]
    )
    session = _session(exporter=exporter)
    session.add_items([make_pdf(name) for name in ("a.pdf", "b.pdf", "c.pdf")])
    await session.run_batch()
    attempted: list[str] = []
    export_item = session.export_item

    async def recording_export(identity: str) -> ExportOutcome:
        attempted.append(identity)
        return await export_item(identity)

    session.export_item = recording_export

    outcomes = await _export_reports(session, logger)

    assert outcomes == [
        ExportOutcome.FAILED,
        ExportOutcome.REFUSED_NOT_SIGNED_IN,
        ExportOutcome.REFUSED_NOT_SIGNED_IN,
    ]
    assert len(attempted) == 1
    assert exporter.created == []
    assert session.is_signed_in is False


def test_exit_codes() -> None:
    assert _determine_exit_code(BatchSummary()) == 0
    assert _determine_exit_code(
        BatchSummary(total_items=2, successful_items=2)
    ) == 0
    assert _determine_exit_code(
        BatchSummary(total_items=2, successful_items=1, failed_items=1)
    ) == 1
    assert _determine_exit_code(BatchSummary(total_items=2, failed_items=2)) == 2
    assert _determine_exit_code(
        BatchSummary(total_items=1, successful_items=1), [ExportOutcome.FAILED]
    ) == 1


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("Mistral API rate limit exceeded (429)", "Wait 60 seconds"),
        ("text extraction failed", "Verify the PDF"),
        ("MISTRAL_API_KEY environment variable not set.", "Set MISTRAL_API_KEY"),
        ("Authentication error. Please sign in again.", "Sign in again"),
        ("Connection timeout", "Check internet connection"),
        ("something odd", "Review error details"),
    ],
)
def test_error_suggestions(message, expected) -> None:
    assert get_error_suggestion(message).startswith(expected)
