"""
Configuration dataclasses for the PDF Report Pipeline.

This module defines type-safe configuration schemas using Python dataclasses.
These schemas are registered with Hydra to enable validation and IDE autocomplete
support for configuration values.
"""

from dataclasses import dataclass, field

from hydra.core.config_store import ConfigStore


class ConfigError(Exception):
    """Configuration error for the PDF Report Pipeline.

    Raised when configuration values are invalid or inconsistent. Using a
    dedicated exception type makes it easier to distinguish configuration
    problems from other runtime errors.
    """


@dataclass
class MistralConfig:
    """Configuration for the Mistral AI services used during generation.

    The same API key drives both text extraction (OCR) and report generation
    (chat completion).
    """

    api_key: str = ""
    """Mistral AI API key. Obtain from https://console.mistral.ai"""

    ocr_model: str = "mistral-ocr-latest"
    """OCR model used to turn uploaded PDFs into page markdown."""

    report_model: str = "mistral-large-latest"
    """Chat model used to write the structured report."""

    empty_page_threshold: int = 0
    """Pages whose stripped markdown is shorter than this many characters are
    dropped from the extracted text. Whitespace-only pages are always dropped;
    the default keeps every page with content."""

    def __post_init__(self) -> None:
        """Validate model names and thresholds."""
        if not self.ocr_model or not self.ocr_model.strip():
            raise ConfigError("ocr_model is required and cannot be empty")
        if not self.report_model or not self.report_model.strip():
            raise ConfigError("report_model is required and cannot be empty")
        if self.empty_page_threshold < 0:
            raise ConfigError("empty_page_threshold must not be negative")


@dataclass
class GoogleConfig:
    """Configuration for Google Docs export and the OAuth consent flow."""

    client_id: str = ""
    """OAuth client ID used by the device authorization flow."""

    client_secret: str = ""
    """OAuth client secret. Required by Google's token endpoint for device
    flow clients of type 'TVs and Limited Input devices'."""

    api_key: str = ""
    """Google API key used when loading the Docs discovery document."""

    access_token: str = ""
    """Pre-issued access token for the 'static' consent provider."""

    consent_provider: str = "device"
    """How credentials are obtained. Options: 'device', 'static'"""

    scopes: list[str] = field(
        default_factory=lambda: ["https://www.googleapis.com/auth/drive.file"]
    )
    """OAuth scopes requested during consent. drive.file is enough to create
    and edit documents owned by this application."""

    discovery_url: str = "https://docs.googleapis.com/$discovery/rest?version=v1"
    """Discovery document for the Google Docs API."""

    openid_configuration_url: str = (
        "https://accounts.google.com/.well-known/openid-configuration"
    )
    """OpenID configuration listing the device, token and revocation
    endpoints."""

    request_timeout: int = 30
    """Timeout in seconds for every HTTP request made to Google."""

    def __post_init__(self) -> None:
        """Validate provider selection and timeout."""
        if self.consent_provider not in ("device", "static"):
            raise ConfigError(
                f"Unknown consent_provider: {self.consent_provider}. "
                "Options: 'device', 'static'"
            )
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be greater than 0")


@dataclass
class ProcessingConfig:
    """Configuration for batch processing behavior."""

    inputs: list[str] = field(default_factory=list)
    """PDF files or directories to submit. Directories are scanned
    (non-recursively) for PDF files."""

    dry_run: bool = False
    """Preview mode: list admitted documents without calling any service."""

    export: bool = False
    """Whether to sign in and export every generated report to Google Docs
    after the batch completes."""

    show_progress: bool = True
    """Whether to display a progress bar while the batch runs."""


@dataclass
class StorageConfig:
    """Configuration for optional disk storage of generated reports."""

    save_reports: bool = False
    """Whether to write each generated report to disk as markdown."""

    output_dir: str = "./data/reports"
    """Directory receiving {stem}_report.md files. Created automatically if
    it doesn't exist."""


@dataclass
class AppConfig:
    """Top-level application configuration.

    Combines all configuration groups into a single type-safe configuration
    object.
    """

    mistral: MistralConfig
    """Mistral AI configuration (extraction and generation)."""

    google: GoogleConfig
    """Google Docs export and consent configuration."""

    processing: ProcessingConfig
    """Processing behavior configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    """Storage options configuration."""


def validate_config(cfg: AppConfig) -> None:
    """Validate cross-group configuration requirements.

    Args:
        cfg: Application configuration object

    Raises:
        ConfigError: If the configuration cannot drive a run. Error messages
            include actionable guidance for fixing the configuration.
    """
    if not cfg.processing.inputs:
        raise ConfigError(
            "Invalid configuration: no inputs given. "
            "Set processing.inputs=[path/to/file.pdf,...]."
        )

    if cfg.processing.dry_run:
        return

    if not cfg.mistral.api_key or not cfg.mistral.api_key.strip():
        raise ConfigError(
            "Invalid configuration: mistral.api_key is empty. "
            "Set the MISTRAL_API_KEY environment variable."
        )

    if cfg.processing.export:
        if cfg.google.consent_provider == "device" and not cfg.google.client_id:
            raise ConfigError(
                "Invalid configuration: export requires google.client_id "
                "for the device consent flow. Set GOOGLE_CLIENT_ID or use "
                "google.consent_provider=static."
            )
        if cfg.google.consent_provider == "static" and not cfg.google.access_token:
            raise ConfigError(
                "Invalid configuration: export with the static consent "
                "provider requires google.access_token. "
                "Set GOOGLE_ACCESS_TOKEN."
            )


def register_configs() -> None:
    """Register structured configs with Hydra.

    This function must be called before Hydra initializes to enable type-safe
    configuration validation and IDE autocomplete support.
    """
    cs = ConfigStore.instance()

    cs.store(group="mistral", name="default", node=MistralConfig)
    cs.store(group="google", name="default", node=GoogleConfig)
    cs.store(group="processing", name="default", node=ProcessingConfig)
    cs.store(group="storage", name="default", node=StorageConfig)

    cs.store(name="base_config", node=AppConfig)
