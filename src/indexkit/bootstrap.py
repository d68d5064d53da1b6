"""Process start-up: load settings, configure logging and tracing."""

from __future__ import annotations

import logging

from indexkit.config import IndexingConfig, IndexingSettings
from indexkit.observability import configure_logging, init_tracing


logger = logging.getLogger(__name__)


def configure(
    settings: IndexingSettings | None = None,
    *,
    json_output: bool = True,
    enable_tracing: bool = False,
    service_name: str = "indexkit",
) -> IndexingConfig:
    """Configure logging (and optionally tracing) and return the shared config holder.

    Args:
        settings: Settings to start from; loaded from the environment when omitted.
        json_output: Emit structured JSON logs when True.
        enable_tracing: Install an OpenTelemetry tracer provider for ``service_name``.
        service_name: Service name reported on spans.
    """
    settings = settings if settings is not None else IndexingSettings()
    configure_logging(settings.log_level, json_output, logger_levels={"indexkit": settings.log_level})
    if enable_tracing:
        init_tracing(service_name)

    logger.info(
        "indexkit configured: language=%s, field_terms=%s, stopwords=%d",
        settings.language,
        settings.index_field_terms,
        len(settings.get_stopwords()),
    )
    return IndexingConfig(settings)
