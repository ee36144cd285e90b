"""
Domain models for the PDF Report Pipeline.

This module defines the data structures that represent one submitted document
as it moves through the two chained state machines (report generation, then
optional export), together with the credential state and the per-run results
used for summary reporting.

Each state machine is a closed set of frozen dataclasses. Data that only exists
in one state (the report, an error message, an export address) lives on that
state's variant, so an item cannot carry a report while it is still pending.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


class GenerationStatus(Enum):
    """Discriminant of the report generation state machine."""

    PENDING = "Pending"
    GENERATING = "Generating"
    DONE = "Done"
    FAILED = "Failed"


class ExportStatus(Enum):
    """Discriminant of the export state machine."""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    DONE = "Done"
    FAILED = "Failed"


class CredentialStatus(Enum):
    """Discriminant of the credential lifecycle."""

    UNSET = "Unset"
    VALID = "Valid"


@dataclass(frozen=True)
class Pending:
    """Submitted, waiting for the next batch run."""

    status = GenerationStatus.PENDING


@dataclass(frozen=True)
class Generating:
    """Text extraction or report generation is in flight."""

    status = GenerationStatus.GENERATING


@dataclass(frozen=True)
class GenerationDone:
    """Report generated successfully."""

    report: str
    status = GenerationStatus.DONE


@dataclass(frozen=True)
class GenerationFailed:
    """Generation stopped on this item; terminal for the generation stage."""

    error: str
    status = GenerationStatus.FAILED


GenerationState = Union[Pending, Generating, GenerationDone, GenerationFailed]


@dataclass(frozen=True)
class ExportNotStarted:
    status = ExportStatus.NOT_STARTED


@dataclass(frozen=True)
class ExportInProgress:
    status = ExportStatus.IN_PROGRESS


@dataclass(frozen=True)
class ExportDone:
    document_id: str
    address: str
    status = ExportStatus.DONE


@dataclass(frozen=True)
class ExportFailed:
    error: str
    status = ExportStatus.FAILED


ExportState = Union[ExportNotStarted, ExportInProgress, ExportDone, ExportFailed]


@dataclass(frozen=True)
class CredentialUnset:
    status = CredentialStatus.UNSET


@dataclass(frozen=True)
class CredentialValid:
    token: str
    status = CredentialStatus.VALID

    def __repr__(self) -> str:
        return "CredentialValid(token='****')"


CredentialState = Union[CredentialUnset, CredentialValid]


@dataclass(frozen=True)
class DocumentSource:
    """Handle on the submitted document. The bytes stay on disk and are only
    read by the extraction collaborator."""

    path: Path
    """Location of the PDF on disk."""

    name: str
    """Display name (file name). Used as the report name hint and export
    title."""

    modified_ns: int
    """Modification time in nanoseconds at submission time."""

    @classmethod
    def from_path(cls, path: Path) -> DocumentSource:
        """Build a source handle from an existing file path."""
        return cls(path=path, name=path.name, modified_ns=path.stat().st_mtime_ns)


@dataclass(frozen=True)
class Item:
    """One submitted document tracked through the pipeline.

    Items are immutable; the registry replaces the record on every transition.
    """

    identity: str
    """Opaque identity, unique within the registry and stable for the item's
    lifetime."""

    source: DocumentSource
    """Handle on the submitted document."""

    generation: GenerationState = field(default_factory=Pending)
    """Current report generation state."""

    export: ExportState = field(default_factory=ExportNotStarted)
    """Current export state."""

    @property
    def name(self) -> str:
        return self.source.name

    @property
    def report(self) -> str | None:
        """Generated report, present only once generation is done."""
        if isinstance(self.generation, GenerationDone):
            return self.generation.report
        return None

    @property
    def generation_error(self) -> str | None:
        if isinstance(self.generation, GenerationFailed):
            return self.generation.error
        return None

    @property
    def export_address(self) -> str | None:
        if isinstance(self.export, ExportDone):
            return self.export.address
        return None

    @property
    def export_error(self) -> str | None:
        if isinstance(self.export, ExportFailed):
            return self.export.error
        return None


@dataclass
class ProcessingResult:
    """Represents the outcome of processing a single item during a batch run.

    Used for summary reporting and logging once the run has finished. The
    authoritative state stays in the registry.
    """

    identity: str
    """Identity of the processed item."""

    name: str
    """Document name for logging and display purposes."""

    success: bool
    """True if a report was generated, False otherwise."""

    report_chars: int = 0
    """Length of the generated report in characters. 0 on failure."""

    error: str | None = None
    """Error message stored on the item when generation failed."""

    processing_time: float = 0.0
    """Processing duration in seconds, covering extraction and generation."""


@dataclass
class BatchSummary:
    """Aggregated outcome of one batch run."""

    total_items: int = 0
    """Number of items in the run's snapshot."""

    successful_items: int = 0
    """Items whose generation reached Done."""

    failed_items: int = 0
    """Items whose generation reached Failed."""

    total_time: float = 0.0
    """Wall-clock duration of the run in seconds."""

    results: list[ProcessingResult] = field(default_factory=list)
    """Per-item results in completion order (equal to submission order)."""

    refused: bool = False
    """True when the run was refused because another run was active."""


class ExportOutcome(Enum):
    """Result of a single export request."""

    EXPORTED = "exported"
    FAILED = "failed"
    REFUSED_UNKNOWN_ITEM = "refused: unknown item"
    REFUSED_NOT_GENERATED = "refused: report not generated"
    REFUSED_NOT_SIGNED_IN = "refused: not signed in"
    REFUSED_IN_PROGRESS = "refused: export already in progress"

    @property
    def refused(self) -> bool:
        return self.name.startswith("REFUSED")


@dataclass(frozen=True)
class ExportedDocument:
    """Remote document created by the export collaborator."""

    document_id: str
    address: str
