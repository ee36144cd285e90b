"""Main entry point for the PDF Report Pipeline."""

import asyncio
import logging
import sys

import hydra
from omegaconf import DictConfig, OmegaConf

from pdf_report_pipeline.cli.commands import dry_run_command, process_command
from pdf_report_pipeline.clients.consent_client import ConsentProvider
from pdf_report_pipeline.clients.exceptions import PipelineClientError
from pdf_report_pipeline.clients.google_consent_client import (
    GoogleDeviceConsentProvider,
    StaticTokenConsentProvider,
)
from pdf_report_pipeline.clients.google_docs_client import GoogleDocsExporter
from pdf_report_pipeline.clients.mistral_client import (
    MistralReportGenerator,
    MistralTextExtractor,
)
from pdf_report_pipeline.domain.config import (
    AppConfig,
    ConfigError,
    GoogleConfig,
    MistralConfig,
    ProcessingConfig,
    StorageConfig,
    register_configs,
    validate_config,
)
from pdf_report_pipeline.orchestration.session import ReportSession
from pdf_report_pipeline.utils.logging import log_notice, setup_logging


def build_config(cfg: DictConfig) -> AppConfig:
    """Convert the Hydra DictConfig into the structured AppConfig.

    Raises:
        ConfigError: If a group holds an invalid value.
    """
    container = OmegaConf.to_container(cfg, resolve=True)
    if not isinstance(container, dict):
        raise ConfigError("Configuration root must be a mapping")
    return AppConfig(
        mistral=MistralConfig(**container.get("mistral", {})),
        google=GoogleConfig(**container.get("google", {})),
        processing=ProcessingConfig(**container.get("processing", {})),
        storage=StorageConfig(**container.get("storage", {})),
    )


def initialize_consent_provider(
    cfg: AppConfig, logger: logging.Logger
) -> ConsentProvider:
    """Pick the consent provider named by google.consent_provider."""
    if cfg.google.consent_provider == "static":
        return StaticTokenConsentProvider(cfg.google)

    def show_user_code(verification_url: str, user_code: str) -> None:
        log_notice(
            logger,
            f"To authorize Google Docs export, visit {verification_url} "
            f"and enter the code: {user_code}",
        )

    return GoogleDeviceConsentProvider(cfg.google, on_user_code=show_user_code)


def initialize_session(cfg: AppConfig, logger: logging.Logger) -> ReportSession:
    """Build the collaborators and the session from configuration.

    Args:
        cfg: Application configuration object
        logger: Logger instance

    Returns:
        ReportSession ready to receive documents
    """
    logger.info("Initializing Mistral clients...")
    extractor = MistralTextExtractor(cfg.mistral)
    generator = MistralReportGenerator(cfg.mistral)
    logger.info("Mistral clients initialized successfully")

    exporter = GoogleDocsExporter(cfg.google)
    consent_provider = initialize_consent_provider(cfg, logger)

    return ReportSession(
        extractor,
        generator,
        exporter,
        consent_provider,
        show_progress=cfg.processing.show_progress,
        notifier=lambda message: log_notice(logger, message),
    )


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> int:
    """Main entry point for the pipeline.

    Args:
        cfg: Hydra configuration object

    Returns:
        Exit code: 0 for success, 1 for partial failure, 2 for complete
        failure, 3 for configuration or fatal errors
    """
    # Register structured configs with Hydra
    register_configs()

    logger = setup_logging()

    try:
        app_cfg = build_config(cfg)
        validate_config(app_cfg)

        if app_cfg.processing.dry_run:
            return dry_run_command(app_cfg, logger)

        session = initialize_session(app_cfg, logger)
        return asyncio.run(process_command(app_cfg, logger, session))

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 3
    except PipelineClientError as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 3
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 3


if __name__ == "__main__":
    sys.exit(main())  # type: ignore[call-arg]
