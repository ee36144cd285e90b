"""Tests for configuration schemas and cross-group validation."""

import pytest

from pdf_report_pipeline.domain.config import (
    AppConfig,
    ConfigError,
    GoogleConfig,
    MistralConfig,
    ProcessingConfig,
    StorageConfig,
    validate_config,
)


def _config(**processing) -> AppConfig:
    return AppConfig(
        mistral=MistralConfig(api_key="k"),
        google=GoogleConfig(client_id="client"),
        processing=ProcessingConfig(inputs=["paper.pdf"], **processing),
        storage=StorageConfig(),
    )


def test_defaults_are_valid() -> None:
    validate_config(_config())


def test_empty_inputs_rejected() -> None:
    cfg = _config()
    cfg.processing.inputs = []

    with pytest.raises(ConfigError, match="no inputs"):
        validate_config(cfg)


def test_missing_api_key_rejected_unless_dry_run() -> None:
    cfg = _config()
    cfg.mistral.api_key = ""
    with pytest.raises(ConfigError, match="MISTRAL_API_KEY"):
        validate_config(cfg)

    dry = _config(dry_run=True)
    dry.mistral.api_key = ""
    validate_config(dry)


def test_export_with_device_flow_requires_client_id() -> None:
    cfg = _config(export=True)
    cfg.google.client_id = ""

    with pytest.raises(ConfigError, match="client_id"):
        validate_config(cfg)


def test_export_with_static_provider_requires_token() -> None:
    cfg = _config(export=True)
    cfg.google = GoogleConfig(consent_provider="static")
    with pytest.raises(ConfigError, match="access_token"):
        validate_config(cfg)

    cfg.google = GoogleConfig(consent_provider="static", access_token="tok")
    validate_config(cfg)


@pytest.mark.parametrize(
    "build",
    [
        lambda: GoogleConfig(consent_provider="browser"),
        lambda: GoogleConfig(request_timeout=0),
        lambda: MistralConfig(report_model=" "),
        lambda: MistralConfig(empty_page_threshold=-1),
    ],
)
def test_invalid_group_values_rejected(build) -> None:
    with pytest.raises(ConfigError):
        build()
