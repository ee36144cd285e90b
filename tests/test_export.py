"""Tests for the single-item export workflow."""

from pathlib import Path

import pytest
from conftest import FakeConsentProvider, FakeExporter

from pdf_report_pipeline.clients.exceptions import ExportAuthError, ExportError
from pdf_report_pipeline.domain.models import (
    DocumentSource,
    ExportInProgress,
    ExportOutcome,
    ExportStatus,
    GenerationDone,
    GenerationFailed,
    Item,
)
from pdf_report_pipeline.domain.registry import ItemRegistry
from pdf_report_pipeline.orchestration.credentials import CredentialManager
from pdf_report_pipeline.orchestration.export import ExportProcessor


async def _ready() -> None:
    return None


def _registry_with(*names: str) -> ItemRegistry:
    registry = ItemRegistry()
    registry.append(
        Item(
            identity=name,
            source=DocumentSource(path=Path(name), name=name, modified_ns=1),
        )
        for name in names
    )
    return registry


async def _signed_in_manager(consent: FakeConsentProvider) -> CredentialManager:
    manager = CredentialManager(consent)
    manager.attach_readiness(_ready(), _ready())
    await manager.wait_ready()
    await manager.request_grant()
    return manager


@pytest.mark.asyncio
async def test_export_done_item(consent) -> None:
    registry = _registry_with("a.pdf")
    registry.update("a.pdf", generation=GenerationDone(report="# Report"))
    exporter = FakeExporter()
    processor = ExportProcessor(
        registry, exporter, await _signed_in_manager(consent)
    )

    outcome = await processor.export_item("a.pdf")

    assert outcome is ExportOutcome.EXPORTED
    item = registry.get("a.pdf")
    assert item.export.status is ExportStatus.DONE
    assert item.export_address == "https://docs.google.com/document/d/doc-1/edit"
    assert exporter.created == [("a.pdf", "# Report", "token-123")]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "generation", [None, GenerationFailed(error="text extraction failed")]
)
async def test_export_refused_until_report_is_generated(consent, generation) -> None:
    registry = _registry_with("a.pdf")
    if generation is not None:
        registry.update("a.pdf", generation=generation)
    before = registry.get("a.pdf")
    exporter = FakeExporter()
    processor = ExportProcessor(
        registry, exporter, await _signed_in_manager(consent)
    )

    outcome = await processor.export_item("a.pdf")

    assert outcome is ExportOutcome.REFUSED_NOT_GENERATED
    assert registry.get("a.pdf") == before
    assert exporter.created == []


@pytest.mark.asyncio
async def test_export_unknown_item_is_refused(consent) -> None:
    processor = ExportProcessor(
        ItemRegistry(), FakeExporter(), await _signed_in_manager(consent)
    )

    assert await processor.export_item("nope") is ExportOutcome.REFUSED_UNKNOWN_ITEM


@pytest.mark.asyncio
async def test_export_without_credential_is_refused(consent) -> None:
    registry = _registry_with("a.pdf")
    registry.update("a.pdf", generation=GenerationDone(report="r"))
    manager = CredentialManager(consent)
    manager.attach_readiness(_ready(), _ready())
    await manager.wait_ready()
    processor = ExportProcessor(registry, FakeExporter(), manager)

    outcome = await processor.export_item("a.pdf")

    assert outcome is ExportOutcome.REFUSED_NOT_SIGNED_IN
    assert registry.get("a.pdf").export.status is ExportStatus.NOT_STARTED
    assert consent.requests == 0


@pytest.mark.asyncio
async def test_export_already_in_progress_is_refused(consent) -> None:
    registry = _registry_with("a.pdf")
    registry.update(
        "a.pdf", generation=GenerationDone(report="r"), export=ExportInProgress()
    )
    exporter = FakeExporter()
    processor = ExportProcessor(
        registry, exporter, await _signed_in_manager(consent)
    )

    assert await processor.export_item("a.pdf") is ExportOutcome.REFUSED_IN_PROGRESS
    assert exporter.created == []


@pytest.mark.asyncio
async def test_auth_failure_unsets_credential_and_blocks_next_export(
    consent,
) -> None:
    registry = _registry_with("a.pdf", "b.pdf")
    for name in ("a.pdf", "b.pdf"):
        registry.update(name, generation=GenerationDone(report="r"))
    exporter = FakeExporter(
        errors=[ExportAuthError("Authentication error. Please sign in again.")]
    )
    manager = await _signed_in_manager(consent)
    processor = ExportProcessor(registry, exporter, manager)

    outcome = await processor.export_item("a.pdf")

    assert outcome is ExportOutcome.FAILED
    assert registry.get("a.pdf").export_error == (
        "Authentication error. Please sign in again."
    )
    assert manager.is_valid() is False
    assert consent.revoked == []
    assert await processor.export_item("b.pdf") is ExportOutcome.REFUSED_NOT_SIGNED_IN


@pytest.mark.asyncio
async def test_generic_failure_keeps_credential_and_allows_retry(consent) -> None:
    registry = _registry_with("a.pdf")
    registry.update("a.pdf", generation=GenerationDone(report="r"))
    exporter = FakeExporter(
        errors=[ExportError("Failed to create Google Doc: 500 Internal Server Error")]
    )
    manager = await _signed_in_manager(consent)
    processor = ExportProcessor(registry, exporter, manager)

    assert await processor.export_item("a.pdf") is ExportOutcome.FAILED
    assert registry.get("a.pdf").export_error == (
        "Failed to create Google Doc: 500 Internal Server Error"
    )
    assert manager.is_valid() is True

    assert await processor.export_item("a.pdf") is ExportOutcome.EXPORTED
    assert registry.get("a.pdf").export.status is ExportStatus.DONE
