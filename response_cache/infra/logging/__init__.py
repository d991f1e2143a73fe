"""Logging infrastructure.

Modules log through the standard library with structured context in
``extra``:

    import logging

    logger = logging.getLogger(__name__)
    logger.debug("Cache hit", extra={"cache_key": key})

Entrypoints call ``setup_logging()`` once to install the JSON Lines console
handler configured by ``LoggingSettings`` (LOG_ environment prefix).
"""

from response_cache.infra.logging.config import configure_logging, setup_logging
from response_cache.infra.logging.formatters import JSONFormatter

__all__ = ["JSONFormatter", "configure_logging", "setup_logging"]
