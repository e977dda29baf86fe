# -*- coding: utf-8 -*-
"""Location: ./tests/conftest.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Shared fixtures for the license scanner test suite.
"""

# Standard
import asyncio
from typing import Dict, List, Optional

# Third-Party
import pytest

# First-Party
from licensescanner.config import get_settings, ScanPolicy
from licensescanner.models import DependencyGraphDocument, LicenseResolution, ResolveMode
from licensescanner.services.http_client_service import SharedHttpClient


@pytest.fixture(autouse=True)
def _reset_shared_state(monkeypatch):
    """Isolate tests from the host environment and cached singletons."""
    for key in ("GH_APP_ID", "GH_APP_PRIVATE_KEY", "GH_ORG_INSTALLATION_ID", "GH_ORG_URL", "GH_APP_REPOSITORY_NAME", "SLACK_WEBHOOK_URL", "RUNNER_DEBUG", "SCAN_TIMEOUT_SECONDS"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    SharedHttpClient._instance = None
    SharedHttpClient._lock = asyncio.Lock()
    yield
    get_settings.cache_clear()
    SharedHttpClient._instance = None


@pytest.fixture
def policy() -> ScanPolicy:
    """Policy blacklisting GPL licenses and ignoring the @internal scope."""
    return ScanPolicy.model_validate({"blacklist": ["GPL-3.0", "AGPL-3.0"], "ignorePackagesRegex": ["^@internal/"]})


def make_document(root_id: Optional[str] = "SPDXRef-repo", packages: Optional[List[Dict]] = None, edges: Optional[List[tuple]] = None) -> DependencyGraphDocument:
    """Build a dependency graph document.

    Args:
        root_id: Element id of the root node, None to omit the root.
        packages: Raw package nodes (SBOM wire names).
        edges: (source, target) relationship pairs.

    Returns:
        DependencyGraphDocument: the parsed document.
    """
    nodes = []
    if root_id is not None:
        nodes.append({"SPDXID": root_id, "name": "com.github.acme/repo", "versionInfo": "main"})
    nodes.extend(packages or [])
    relationships = [{"spdxElementId": source, "relatedSpdxElement": target} for source, target in edges or []]
    return DependencyGraphDocument.model_validate({"packages": nodes, "relationships": relationships})


class FakeResolver:
    """License resolver returning canned resolutions and recording calls."""

    def __init__(self, licenses: Optional[Dict[str, LicenseResolution]] = None, fail_on: Optional[str] = None, delay: float = 0.0):
        self.licenses = licenses or {}
        self.fail_on = fail_on
        self.delay = delay
        self.calls: List[tuple] = []

    async def resolve(self, name, version=None, explicit_license=None):
        self.calls.append((name, version, explicit_license))
        if self.delay:
            await asyncio.sleep(self.delay)
        if name == self.fail_on:
            raise RuntimeError(f"boom while resolving {name}")
        if explicit_license:
            return LicenseResolution(license=explicit_license, resolve_mode=ResolveMode.EXPLICIT)
        return self.licenses.get(name, LicenseResolution(license="MIT", resolve_mode=ResolveMode.NPM_CURRENT_VERSION))


@pytest.fixture
def document_factory():
    """Expose make_document as a fixture."""
    return make_document


@pytest.fixture
def fake_resolver_factory():
    """Expose FakeResolver as a fixture."""
    return FakeResolver
