"""Orchestration layer: batch generation, export and credential lifecycle."""

from .batch import BatchProcessor
from .credentials import CredentialManager
from .export import ExportProcessor
from .session import ReportSession

__all__ = [
    "BatchProcessor",
    "CredentialManager",
    "ExportProcessor",
    "ReportSession",
]
