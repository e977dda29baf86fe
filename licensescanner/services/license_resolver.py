# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/license_resolver.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Best-effort license resolution.

Resolution order, each stage tried only when the previous one failed:

1. ``explicit``: the license GitHub concluded for the SBOM node.
2. ``npmCurrVer``: the npm registry manifest of the exact version.
3. ``npmLatestVer``: the npm registry manifest of the ``latest`` dist-tag.
4. ``failed``: the sentinel license ``non-NPM``. The package is assumed to
   come from an ecosystem the registry does not cover; it is not retried.

The resolver only reads from the registry and holds no mutable state, so any
number of ``resolve`` calls may run concurrently.
"""

# Standard
from typing import Any, Optional
from urllib.parse import quote

# Third-Party
import httpx
import orjson

# First-Party
from licensescanner.errors import ResolutionError
from licensescanner.models import LicenseResolution, NON_NPM_LICENSE, ResolveMode
from licensescanner.services.http_client_service import get_http_client
from licensescanner.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

LATEST_TAG = "latest"


def registry_package_path(name: str) -> str:
    """Escape a package name for use in a registry URL path.

    Scoped packages keep their leading ``@`` while the scope separator is
    percent-encoded, as the npm registry expects.

    Args:
        name: npm package name.

    Returns:
        str: URL path segment.

    Examples:
        >>> registry_package_path("left-pad")
        'left-pad'
        >>> registry_package_path("@babel/core")
        '@babel%2Fcore'
    """
    return quote(name, safe="@")


def extract_license(manifest: Any) -> Optional[str]:
    """Read the declared license from a registry manifest.

    Args:
        manifest: Decoded manifest body.

    Returns:
        Optional[str]: The declared license string, None when none is declared.

    Raises:
        ResolutionError: If the body is not a manifest object.

    Examples:
        >>> extract_license({"license": "MIT"})
        'MIT'
        >>> extract_license({"license": {"type": "BSD-3-Clause", "url": "..."}})
        'BSD-3-Clause'
        >>> extract_license({"name": "no-license"}) is None
        True
    """
    if not isinstance(manifest, dict):
        raise ResolutionError("registry returned a non-object manifest")

    declared = manifest.get("license")
    if isinstance(declared, dict):
        declared = declared.get("type")
    if isinstance(declared, str) and declared:
        return declared
    return None


class NpmLicenseResolver:
    """Resolve package licenses against the npm registry.

    Attributes:
        registry_url: Base URL of the registry.
    """

    def __init__(self, registry_url: str = "https://registry.npmjs.org", client: Optional[httpx.AsyncClient] = None) -> None:
        """Initialize the resolver.

        Args:
            registry_url: Base URL of the npm registry.
            client: HTTP client to use; the shared client when omitted.

        Examples:
            >>> NpmLicenseResolver("https://registry.example.com/").registry_url
            'https://registry.example.com'
        """
        self.registry_url = registry_url.rstrip("/")
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or the shared one.

        Returns:
            httpx.AsyncClient: client used for registry requests.
        """
        if self._client is None:
            self._client = await get_http_client()
        return self._client

    async def fetch_license(self, name: str, version: str) -> Optional[str]:
        """Fetch the declared license of ``name@version``.

        Args:
            name: Package name.
            version: Exact version or dist-tag.

        Returns:
            Optional[str]: Declared license, None when the manifest has none.

        Raises:
            ResolutionError: If the package or version is not found, or the
                registry cannot be reached.
        """
        url = f"{self.registry_url}/{registry_package_path(name)}/{quote(version, safe='')}"
        client = await self._get_client()
        try:
            response = await client.get(url, headers={"Accept": "application/json"})
            response.raise_for_status()
            manifest = orjson.loads(response.content)
        except httpx.HTTPStatusError as exc:
            raise ResolutionError(f"{name}@{version}: registry returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ResolutionError(f"{name}@{version}: {exc}") from exc
        except orjson.JSONDecodeError as exc:
            raise ResolutionError(f"{name}@{version}: invalid registry response") from exc
        return extract_license(manifest)

    async def resolve(self, name: str, version: Optional[str] = None, explicit_license: Optional[str] = None) -> LicenseResolution:
        """Resolve a license, trying progressively weaker sources.

        Args:
            name: Package name.
            version: Version from the SBOM; ``latest`` is queried when absent.
            explicit_license: License concluded in the SBOM, if any.

        Returns:
            LicenseResolution: The license and the mode that produced it.
        """
        if explicit_license:
            return LicenseResolution(license=explicit_license, resolve_mode=ResolveMode.EXPLICIT)

        try:
            license_id = await self.fetch_license(name, version or LATEST_TAG)
            return LicenseResolution(license=license_id, resolve_mode=ResolveMode.NPM_CURRENT_VERSION)
        except ResolutionError as exc:
            logger.debug("Version lookup failed, retrying latest: %s", exc)

        try:
            license_id = await self.fetch_license(name, LATEST_TAG)
            return LicenseResolution(license=license_id, resolve_mode=ResolveMode.NPM_LATEST_VERSION)
        except ResolutionError as exc:
            logger.debug("Latest lookup failed, treating %s as non-NPM: %s", name, exc)

        return LicenseResolution(license=NON_NPM_LICENSE, resolve_mode=ResolveMode.FAILED)
