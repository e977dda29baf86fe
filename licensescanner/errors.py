# -*- coding: utf-8 -*-
"""Location: ./licensescanner/errors.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Exception hierarchy for the license scanner.

Only ``ConfigurationError``, ``AuthenticationError`` and
``NoRepositoriesFoundError`` are allowed to terminate a run. Per-repository
failures are raised as ``RepositoryProcessingError`` and counted by the
scheduler. ``ResolutionError`` never leaves the license resolver.
"""


class LicenseScannerError(Exception):
    """Base class for all scanner errors."""


class ConfigurationError(LicenseScannerError):
    """Missing or invalid configuration detected before scanning.

    Examples:
        >>> str(ConfigurationError("no blacklist provided!"))
        'no blacklist provided!'
        >>> issubclass(ConfigurationError, LicenseScannerError)
        True
    """


class AuthenticationError(LicenseScannerError):
    """The GitHub App could not be authenticated."""


class NoRepositoriesFoundError(LicenseScannerError):
    """The organization returned no scannable repositories."""


class ResolutionError(LicenseScannerError):
    """A package could not be found in the license metadata source."""


class RepositoryProcessingError(LicenseScannerError):
    """Scanning a single repository failed.

    Attributes:
        repo (str): the repository that failed.
    """

    def __init__(self, repo: str, message: str):
        """Initialize a repository processing error.

        Args:
            repo: name of the repository that failed.
            message: the failure reason.

        Examples:
            >>> err = RepositoryProcessingError("web-app", "sbom unavailable")
            >>> (err.repo, str(err))
            ('web-app', 'web-app: sbom unavailable')
        """
        self.repo = repo
        super().__init__(f"{repo}: {message}")


class ScanTimeoutError(LicenseScannerError):
    """The repository fan-out exceeded the configured timeout."""
