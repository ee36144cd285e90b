"""External collaborators (Mistral, Google Docs, Google OAuth).

This module provides the collaborator interfaces consumed by the orchestration
layer, their Mistral and Google implementations, and the custom exception
classes used for error handling.
"""

from .consent_client import ConsentProvider
from .exceptions import (
    ConsentDeniedError,
    CredentialError,
    ExportAuthError,
    ExportError,
    ExtractionError,
    NotReadyError,
    PipelineClientError,
    ReportGenerationError,
)
from .export_client import DocumentExporter
from .extraction_client import TextExtractor
from .google_consent_client import (
    GoogleDeviceConsentProvider,
    StaticTokenConsentProvider,
)
from .google_docs_client import GoogleDocsExporter
from .mistral_client import MistralReportGenerator, MistralTextExtractor
from .report_client import ReportGenerator

__all__ = [
    "ConsentProvider",
    "DocumentExporter",
    "ReportGenerator",
    "TextExtractor",
    "PipelineClientError",
    "ExtractionError",
    "ReportGenerationError",
    "ExportError",
    "ExportAuthError",
    "CredentialError",
    "ConsentDeniedError",
    "NotReadyError",
    "GoogleDeviceConsentProvider",
    "StaticTokenConsentProvider",
    "GoogleDocsExporter",
    "MistralReportGenerator",
    "MistralTextExtractor",
]
