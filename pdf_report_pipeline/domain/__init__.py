"""Domain models, registry and configuration schemas

This module provides the domain layer for the PDF Report Pipeline, including
type-safe configuration schemas, the per-item state machines and the item
registry.
"""

from .config import (
    AppConfig,
    ConfigError,
    GoogleConfig,
    MistralConfig,
    ProcessingConfig,
    StorageConfig,
    register_configs,
    validate_config,
)
from .models import (
    BatchSummary,
    CredentialStatus,
    CredentialUnset,
    CredentialValid,
    DocumentSource,
    ExportDone,
    ExportedDocument,
    ExportFailed,
    ExportInProgress,
    ExportNotStarted,
    ExportOutcome,
    ExportStatus,
    GenerationDone,
    GenerationFailed,
    GenerationStatus,
    Generating,
    Item,
    Pending,
    ProcessingResult,
)
from .prompt import build_report_prompt
from .registry import ItemRegistry

__all__ = [
    "AppConfig",
    "ConfigError",
    "GoogleConfig",
    "MistralConfig",
    "ProcessingConfig",
    "StorageConfig",
    "register_configs",
    "validate_config",
    "BatchSummary",
    "CredentialStatus",
    "CredentialUnset",
    "CredentialValid",
    "DocumentSource",
    "ExportDone",
    "ExportedDocument",
    "ExportFailed",
    "ExportInProgress",
    "ExportNotStarted",
    "ExportOutcome",
    "ExportStatus",
    "GenerationDone",
    "GenerationFailed",
    "GenerationStatus",
    "Generating",
    "Item",
    "Pending",
    "ProcessingResult",
    "build_report_prompt",
    "ItemRegistry",
]
