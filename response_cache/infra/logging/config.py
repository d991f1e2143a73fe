"""Logging configuration setup.

Installs a single console handler on the root logger; every module logger
in the package propagates to it. JSON Lines output is the default so cache
diagnostics can be shipped to a log aggregator unchanged.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

from response_cache.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from response_cache.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False

TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str | None = None,
    include_process_info: bool = False,
    include_thread_info: bool = False,
    stream: Any = None,
) -> logging.Handler:
    """Configure the root logger with one console handler.

    Existing handlers installed by a previous call are replaced, so calling
    this twice does not duplicate output.

    Args:
        log_level: Root logger level name.
        json_logs: Emit JSON Lines instead of plain text.
        service_name: Added as a static ``service`` field to JSON records.
        include_process_info: Include process ID and name in JSON records.
        include_thread_info: Include thread ID and name in JSON records.
        stream: Output stream (defaults to stderr).

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name("response_cache.console")

    if json_logs:
        static = {"service": service_name} if service_name else None
        handler.setFormatter(
            JSONFormatter(
                static=static,
                include_process_info=include_process_info,
                include_thread_info=include_thread_info,
            )
        )
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "response_cache.console":
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(log_level.upper())

    logger.debug(
        "Logging configured",
        extra={"log_level": log_level, "json_logs": json_logs},
    )
    return handler


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from response_cache.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = {**settings_obj.to_logging_kwargs(), **configure_kwargs}
    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True
