"""Structlog configuration for the forum API.

Every event goes through one shared processor chain (request context, app
info, secret masking, level, timestamp) and is rendered to stdout, plus a
rotating JSON file when a log directory is configured.
"""

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor


if TYPE_CHECKING:
    from src.config.settings import Settings

from src.core.context import get_context


# Key words that mark a value as a secret. Keys are split on non-alphanumeric
# characters, so ``auth_token`` and ``Authorization`` match while
# ``author_id`` does not.
SENSITIVE_KEY_PARTS = frozenset(
    {
        "auth",
        "authorization",
        "bearer",
        "credentials",
        "jwt",
        "passwd",
        "password",
        "secret",
        "token",
    }
)
SENSITIVE_KEYS = frozenset({"api_key", "apikey", "x-api-key"})

_KEY_SEPARATOR = re.compile(r"[^a-z0-9]+")

# Values up to this length are fully masked
_MIN_MASK_LENGTH = 4

# Third-party loggers kept at WARNING
_QUIET_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "cassandra",
    "cassandra_asyncio",
    "redis",
    "httpx",
    "httpcore",
)


def is_sensitive_key(key: str) -> bool:
    """Whether a log field named ``key`` holds a secret."""
    lowered = key.lower()
    if lowered in SENSITIVE_KEYS:
        return True
    return not SENSITIVE_KEY_PARTS.isdisjoint(_KEY_SEPARATOR.split(lowered))


def mask(value: str) -> str:
    """Keep the first and last two characters of a secret."""
    if len(value) > _MIN_MASK_LENGTH:
        return value[:2] + "*" * (len(value) - _MIN_MASK_LENGTH) + value[-2:]
    return "***"


def _mask_field(key: str, value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _mask_field(k, v) for k, v in value.items()}
    if isinstance(value, str) and is_sensitive_key(key):
        return mask(value)
    return value


def filter_sensitive_data(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Mask secret fields (tokens, authorization headers) in log events.

    Identifiers such as ``author_id`` or ``user_id`` pass through unchanged.
    """
    return {k: _mask_field(k, v) for k, v in event_dict.items()}


def add_context_processor(
    logger: logging.Logger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add request context (request_id, user_id, trace_id) to log events."""
    event_dict.update(get_context())
    return event_dict


def add_app_info_processor(
    app_name: str,
    app_version: str,
    environment: str,
) -> Processor:
    """Create a processor that stamps events with app name, version and env."""

    def processor(
        logger: logging.Logger,
        method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        event_dict["app"] = app_name
        event_dict["version"] = app_version
        event_dict["environment"] = environment
        return event_dict

    return processor


def build_shared_processors(settings: "Settings") -> list[Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        add_context_processor,
        add_app_info_processor(
            settings.app_name, settings.app_version, settings.environment
        ),
        filter_sensitive_data,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _attach(
    root: logging.Logger,
    handler: logging.Handler,
    level: str,
    renderer: Processor,
    shared_processors: list[Processor],
) -> None:
    handler.setLevel(getattr(logging, level.upper()))
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    root.addHandler(handler)


def configure_structlog(
    settings: "Settings",
    log_dir: Path | str | None = None,
) -> None:
    """Configure structlog over stdlib logging.

    Args:
        settings: Application settings.
        log_dir: Directory for the rotating JSON log file; no file when None.
    """
    log_level = settings.log_level
    shared_processors = build_shared_processors(settings)

    if settings.log_format == "json":
        console_renderer: Processor = structlog.processors.JSONRenderer()
    else:
        console_renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    _attach(
        root_logger,
        logging.StreamHandler(sys.stdout),
        log_level,
        console_renderer,
        shared_processors,
    )

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        _attach(
            root_logger,
            RotatingFileHandler(
                filename=str(log_dir / f"{settings.app_name}.log"),
                maxBytes=settings.log_file_max_bytes,
                backupCount=settings.log_file_backup_count,
                encoding="utf-8",
            ),
            log_level,
            structlog.processors.JSONRenderer(),
            shared_processors,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)
