# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/logging_service.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Logging Service.

Configures the ``licensescanner`` logger hierarchy once per process and hands
out module loggers. Debug output (per-repository progress, configuration dump)
is enabled with ``RUNNER_DEBUG=1``, which GitHub Actions sets when a workflow
is re-run with debug logging.

Usage:
    from licensescanner.services.logging_service import LoggingService

    logging_service = LoggingService()
    logger = logging_service.get_logger(__name__)
"""

# Standard
import logging
import sys
from typing import Optional, TextIO

ROOT_LOGGER_NAME = "licensescanner"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggingService:
    """Process-wide logging configuration for the scanner.

    Examples:
        >>> service = LoggingService()
        >>> service.get_logger("licensescanner.test").name
        'licensescanner.test'
    """

    _handler: Optional[logging.Handler] = None

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger for the given module name.

        Args:
            name: Usually ``__name__`` of the calling module.

        Returns:
            logging.Logger: The named logger.
        """
        return logging.getLogger(name)

    def configure(self, level: str = "INFO", debug: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
        """Attach a single stream handler to the scanner's root logger.

        Calling this again replaces the previous handler, so repeated runs in
        one process (tests, notebooks) do not duplicate output.

        Args:
            level: Log level name used when ``debug`` is False.
            debug: Force DEBUG level.
            stream: Output stream (defaults to stderr).

        Returns:
            logging.Logger: The configured root scanner logger.

        Examples:
            >>> import io
            >>> buf = io.StringIO()
            >>> root = LoggingService().configure(debug=True, stream=buf)
            >>> root.level == logging.DEBUG
            True
            >>> LoggingService().configure(level="warning", stream=buf).level == logging.WARNING
            True
        """
        root = logging.getLogger(ROOT_LOGGER_NAME)
        if LoggingService._handler is not None:
            root.removeHandler(LoggingService._handler)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        LoggingService._handler = handler

        effective = logging.DEBUG if debug else logging.getLevelName(level.upper())
        if not isinstance(effective, int):
            effective = logging.INFO
        root.setLevel(effective)
        return root
