import json
import logging
import sys
from logging.handlers import RotatingFileHandler, SocketHandler

# Attributes passed through ``extra=`` by the lookup pipeline.
LOOKUP_FIELDS = ("e164", "tier", "status")

# Third-party loggers that are too chatty at INFO.
NOISY_LOGGERS = ("urllib3", "sqlalchemy.engine")


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings, keeping lookup context fields."""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "time": self.formatTime(record, "%Y-%m-%d %H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for field in LOOKUP_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                data[field] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def configure_logging(
    *,
    level: str | int = logging.INFO,
    fmt: str | None = None,
    log_file: str | None = None,
    json_format: bool = False,
    max_bytes: int = 0,
    backup_count: int = 0,
    remote_host: str | None = None,
    remote_port: int = 0,
) -> None:
    """Configure the root logger for the lookup service.

    Parameters
    ----------
    level:
        Logging level as string or numeric constant.
    fmt:
        Format string for plain-text records.
    log_file:
        Optional path to a file where logs should also be written.
    json_format:
        If ``True`` emit one JSON object per record.
    max_bytes:
        Rotate ``log_file`` once it grows past this size; ``0`` disables rotation.
    backup_count:
        Number of rotated files to keep.
    remote_host, remote_port:
        Optional log collector reached through a ``SocketHandler``.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    log_level = level
    if isinstance(level, str):
        log_level = getattr(logging, level.upper(), logging.INFO)

    if json_format:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file and max_bytes > 0:
        handlers.append(
            RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        )
    elif log_file:
        handlers.append(logging.FileHandler(log_file))
    if remote_host:
        handlers.append(SocketHandler(remote_host, remote_port))

    root.setLevel(log_level)
    for h in handlers:
        h.setFormatter(formatter)
        root.addHandler(h)

    if log_level != logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
