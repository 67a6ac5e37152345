import logging

from prometheus_client import start_http_server

from .config import Settings, settings as default_settings
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def initialize(settings: Settings = default_settings) -> None:
    """Configure logging and start the metrics endpoint if enabled."""
    configure_logging(
        level=settings.log_level,
        fmt=settings.log_format,
        log_file=settings.log_file,
        json_format=settings.log_json,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
        remote_host=settings.log_remote_host or None,
        remote_port=int(settings.log_remote_port) if settings.log_remote_host else 0,
    )
    if not settings.veriphone_api_key:
        logger.warning("VERIPHONE_API_KEY is not set; uncached lookups will fail with 503")
    if settings.metrics_port:
        try:
            start_http_server(settings.metrics_port)
            logger.info("Started Prometheus metrics server on port %s", settings.metrics_port)
        except OSError as exc:
            logger.error("Failed to start metrics server: %s", exc)
