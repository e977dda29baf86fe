# -*- coding: utf-8 -*-
"""Location: ./licensescanner/config.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Scanner configuration.

Two sources feed a run:

- ``Settings``: environment variables (and an optional ``.env`` file) carrying
  the GitHub App credentials, the organization context, the Slack webhook and
  HTTP client tuning.
- ``ScanPolicy``: the YAML policy file (``config.yml`` by default) listing the
  blacklisted license identifiers and the package-name regexes to ignore.

Example policy file::

    blacklist:
      - GPL-3.0
      - AGPL-3.0
    ignorePackagesRegex:
      - "^@myorg/"
"""

# Standard
from functools import lru_cache
import logging
from pathlib import Path
import re
from typing import Any, List, Optional, Pattern
from urllib.parse import urlsplit

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, field_validator, PrivateAttr, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

# First-Party
from licensescanner.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _empty_string_to_none(value: Any) -> Any:
    """Treat empty optional env vars as unset (None).

    Args:
        value: The raw value from the environment variable.

    Returns:
        None if the value is an empty string, otherwise the original value.

    Examples:
        >>> _empty_string_to_none("  ") is None
        True
        >>> _empty_string_to_none("42")
        '42'
    """
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class Settings(BaseSettings):
    """Runtime settings read from the environment.

    Variable names match the GitHub Actions workflow that runs the scanner,
    e.g. ``GH_APP_ID``, ``GH_APP_PRIVATE_KEY``, ``GH_ORG_URL``.
    """

    # GitHub App context
    gh_app_id: Optional[str] = Field(default=None, description="GitHub App identifier")
    gh_app_private_key: Optional[SecretStr] = Field(default=None, description="PEM private key of the GitHub App; literal \\n sequences are unescaped")
    gh_org_installation_id: Optional[int] = Field(default=None, description="Installation id of the app on the organization")
    gh_org_url: Optional[str] = Field(default=None, description="Organization URL, e.g. https://github.com/my-org")
    gh_app_repository_name: Optional[str] = Field(default=None, description="Repository hosting the results issue")
    github_api_url: str = Field(default="https://api.github.com", description="GitHub REST API base URL")

    # Notifications
    slack_webhook_url: Optional[str] = Field(default=None, description="Slack incoming webhook URL")

    # Scan behaviour
    policy_file: str = Field(default="config.yml", description="Path to the YAML license policy")
    npm_registry_url: str = Field(default="https://registry.npmjs.org", description="npm registry used for license lookups")
    scan_concurrency: int = Field(default=2, ge=1, description="Repositories scanned concurrently (kept low for API rate limits)")
    scan_timeout_seconds: Optional[float] = Field(default=None, gt=0, description="Optional timeout for the whole repository fan-out")

    # Logging
    runner_debug: bool = Field(default=False, description="Enable debug logging (set by GitHub Actions as RUNNER_DEBUG=1)")
    log_level: str = Field(default="INFO", description="Log level when debug logging is off")

    # HTTP client settings
    skip_ssl_verify: bool = Field(default=False, description="Skip SSL certificate verification. WARNING: development only.")
    httpx_max_connections: int = Field(default=50, description="Maximum total concurrent HTTP connections")
    httpx_max_keepalive_connections: int = Field(default=20, description="Maximum idle keepalive connections to retain")
    httpx_keepalive_expiry: float = Field(default=30.0, description="Seconds before idle keepalive connections are closed")
    httpx_connect_timeout: float = Field(default=10.0, description="Timeout in seconds for establishing new connections")
    httpx_read_timeout: float = Field(default=60.0, description="Timeout in seconds for reading response data (SBOM exports can be slow)")
    httpx_write_timeout: float = Field(default=30.0, description="Timeout in seconds for writing request data")
    httpx_pool_timeout: float = Field(default=30.0, description="Timeout in seconds waiting for a connection from the pool")

    @field_validator("gh_app_id", "gh_org_installation_id", "gh_org_url", "gh_app_repository_name", "slack_webhook_url", "scan_timeout_seconds", mode="before")
    @classmethod
    def empty_string_to_none(cls, value: Any) -> Any:
        """Delegate to shared validator."""
        return _empty_string_to_none(value)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def app_private_key(self) -> Optional[str]:
        """PEM private key with escaped newlines restored.

        Returns:
            The usable PEM string, or None when unset.

        Examples:
            >>> s = Settings(gh_app_private_key="-----BEGIN-----\\\\nabc\\\\n-----END-----", _env_file=None)
            >>> s.app_private_key.splitlines()
            ['-----BEGIN-----', 'abc', '-----END-----']
        """
        if self.gh_app_private_key is None:
            return None
        return self.gh_app_private_key.get_secret_value().replace("\\n", "\n")

    @property
    def org_name(self) -> str:
        """Organization login derived from ``gh_org_url``.

        Returns:
            The organization name.

        Raises:
            ConfigurationError: If no organization URL is configured.

        Examples:
            >>> Settings(gh_org_url="https://github.com/acme", _env_file=None).org_name
            'acme'
        """
        if not self.gh_org_url:
            raise ConfigurationError("no organisation github URL provided!")
        return urlsplit(self.gh_org_url).path.strip("/")

    def require_credentials(self) -> None:
        """Validate that everything needed to talk to GitHub is present.

        Raises:
            ConfigurationError: If credentials, the app repository name or the
                organization URL are missing.
        """
        if not self.gh_app_id or not self.gh_app_private_key or not self.gh_org_installation_id:
            raise ConfigurationError("missing credentials!")
        if not self.gh_app_repository_name:
            raise ConfigurationError("no app repository name provided!")
        if not self.gh_org_url:
            raise ConfigurationError("no organisation github URL provided!")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.
    """
    return Settings()


class ScanPolicy(BaseModel):
    """License policy applied to resolved packages.

    Attributes:
        blacklist: License identifiers considered unacceptable (exact match).
        ignore_packages_regex: Package-name patterns excluded from the report.

    Examples:
        >>> policy = ScanPolicy.model_validate({"blacklist": ["GPL-3.0"], "ignorePackagesRegex": ["^@acme/"]})
        >>> policy.is_blacklisted("GPL-3.0"), policy.is_blacklisted("MIT")
        (True, False)
        >>> policy.is_ignored("@acme/ui"), policy.is_ignored("left-pad")
        (True, False)
    """

    model_config = ConfigDict(populate_by_name=True)

    blacklist: List[str]
    ignore_packages_regex: List[str] = Field(alias="ignorePackagesRegex")

    _ignore_patterns: List[Pattern[str]] = PrivateAttr(default_factory=list)

    @field_validator("ignore_packages_regex")
    @classmethod
    def validate_patterns(cls, patterns: List[str]) -> List[str]:
        """Reject patterns that do not compile.

        Args:
            patterns: Raw regular expressions from the policy file.

        Returns:
            The unchanged patterns.

        Raises:
            ValueError: If any pattern is not a valid regular expression.
        """
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"invalid ignore pattern {pattern!r}: {exc}") from exc
        return patterns

    def model_post_init(self, __context: Any) -> None:
        """Compile the ignore patterns once per policy."""
        self._ignore_patterns = [re.compile(pattern) for pattern in self.ignore_packages_regex]

    def is_ignored(self, package_name: str) -> bool:
        """Return True when any ignore pattern matches the package name.

        Args:
            package_name: Name of the package.

        Returns:
            bool: whether the package is excluded from the report.
        """
        return any(pattern.search(package_name) for pattern in self._ignore_patterns)

    def is_blacklisted(self, license_id: Optional[str]) -> bool:
        """Return True when the license is on the blacklist.

        Args:
            license_id: Resolved license string, None when none was declared.

        Returns:
            bool: whether the license is blacklisted.
        """
        return license_id is not None and license_id in self.blacklist


def load_policy(policy_file: str) -> ScanPolicy:
    """Load and validate the YAML policy file.

    Args:
        policy_file: Path to the policy file.

    Returns:
        ScanPolicy: The validated policy.

    Raises:
        ConfigurationError: If the file is missing, unparsable, or lacks either list.

    Examples:
        >>> try:
        ...     load_policy("/nonexistent/config.yml")
        ... except ConfigurationError as e:
        ...     "not found" in str(e)
        True
    """
    path = Path(policy_file)
    if not path.exists():
        raise ConfigurationError(f"Policy file not found: {policy_file}")

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"failed to parse configs! {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError("failed to parse configs! expected a mapping at the top level")
    if raw.get("blacklist") is None:
        raise ConfigurationError("no blacklist provided!")
    if raw.get("ignorePackagesRegex") is None:
        raise ConfigurationError("no ignorePackagesRegex provided!")

    try:
        policy = ScanPolicy.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"failed to parse configs! {exc}") from exc

    logger.debug("licenseBlacklist: %s", policy.blacklist)
    logger.debug("ignorePackagesRegex: %s", policy.ignore_packages_regex)
    return policy
