# -*- coding: utf-8 -*-
"""Location: ./tests/unit/licensescanner/services/test_license_resolver.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Unit tests for the npm license resolver.
"""

# Standard
import asyncio

# Third-Party
import httpx
import pytest

# First-Party
from licensescanner.errors import ResolutionError
from licensescanner.models import ResolveMode
from licensescanner.services.license_resolver import extract_license, NpmLicenseResolver

REGISTRY = "https://registry.test"


def _resolver(handler):
    """Build a resolver whose HTTP traffic goes to ``handler``."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NpmLicenseResolver(REGISTRY, client=client)


def _registry(manifests):
    """Fake registry serving ``{path: manifest}``; everything else is a 404."""
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.raw_path.decode())
        manifest = manifests.get(request.url.raw_path.decode())
        if manifest is None:
            return httpx.Response(404, json={"error": "Not found"})
        return httpx.Response(200, json=manifest)

    return handler, requested


@pytest.mark.asyncio
async def test_explicit_license_skips_registry():
    handler, requested = _registry({})
    resolver = _resolver(handler)

    result = await resolver.resolve("left-pad", "1.3.0", explicit_license="GPL-3.0")

    assert result.license == "GPL-3.0"
    assert result.resolve_mode == ResolveMode.EXPLICIT
    assert requested == []


@pytest.mark.asyncio
async def test_exact_version_lookup():
    handler, requested = _registry({"/left-pad/1.3.0": {"name": "left-pad", "version": "1.3.0", "license": "WTFPL"}})
    resolver = _resolver(handler)

    result = await resolver.resolve("left-pad", "1.3.0")

    assert (result.license, result.resolve_mode) == ("WTFPL", ResolveMode.NPM_CURRENT_VERSION)
    assert requested == ["/left-pad/1.3.0"]


@pytest.mark.asyncio
async def test_falls_back_to_latest_when_version_missing():
    handler, requested = _registry({"/left-pad/latest": {"license": "MIT"}})
    resolver = _resolver(handler)

    result = await resolver.resolve("left-pad", "0.0.0-missing")

    assert (result.license, result.resolve_mode) == ("MIT", ResolveMode.NPM_LATEST_VERSION)
    assert requested == ["/left-pad/0.0.0-missing", "/left-pad/latest"]


@pytest.mark.asyncio
async def test_falls_back_on_network_error():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if len(calls) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"license": "Apache-2.0"})

    result = await _resolver(handler).resolve("express", "4.18.2")

    assert (result.license, result.resolve_mode) == ("Apache-2.0", ResolveMode.NPM_LATEST_VERSION)


@pytest.mark.asyncio
async def test_unknown_package_resolves_to_non_npm():
    handler, requested = _registry({})

    result = await _resolver(handler).resolve("com.example:java-lib", "2.1")

    assert (result.license, result.resolve_mode) == ("non-NPM", ResolveMode.FAILED)
    assert len(requested) == 2


@pytest.mark.asyncio
async def test_invalid_json_counts_as_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    result = await _resolver(handler).resolve("broken", "1.0.0")

    assert result.resolve_mode == ResolveMode.FAILED


@pytest.mark.asyncio
async def test_registry_unknown_literal_is_preserved():
    handler, _ = _registry({"/mystery/1.0.0": {"license": "Unknown"}})

    result = await _resolver(handler).resolve("mystery", "1.0.0")

    assert (result.license, result.resolve_mode) == ("Unknown", ResolveMode.NPM_CURRENT_VERSION)


@pytest.mark.asyncio
async def test_manifest_without_license_resolves_to_none():
    handler, requested = _registry({"/nolic/1.0.0": {"name": "nolic", "version": "1.0.0"}})

    result = await _resolver(handler).resolve("nolic", "1.0.0")

    assert result.license is None
    assert result.resolve_mode == ResolveMode.NPM_CURRENT_VERSION
    assert requested == ["/nolic/1.0.0"]


@pytest.mark.asyncio
async def test_missing_version_queries_latest_as_current():
    handler, requested = _registry({"/lodash/latest": {"license": "MIT"}})

    result = await _resolver(handler).resolve("lodash")

    assert result.resolve_mode == ResolveMode.NPM_CURRENT_VERSION
    assert requested == ["/lodash/latest"]


@pytest.mark.asyncio
async def test_scoped_package_path_is_escaped():
    handler, requested = _registry({"/@babel%2Fcore/7.24.0": {"license": "MIT"}})

    result = await _resolver(handler).resolve("@babel/core", "7.24.0")

    assert result.license == "MIT"
    assert requested == ["/@babel%2Fcore/7.24.0"]


@pytest.mark.asyncio
async def test_concurrent_resolutions_are_independent():
    handler, _ = _registry({f"/pkg-{i}/1.0.0": {"license": f"L-{i}"} for i in range(20)})
    resolver = _resolver(handler)

    results = await asyncio.gather(*(resolver.resolve(f"pkg-{i}", "1.0.0") for i in range(20)))

    assert [r.license for r in results] == [f"L-{i}" for i in range(20)]


class TestExtractLicense:
    """Tests for manifest license extraction."""

    def test_string_license(self):
        assert extract_license({"license": "ISC"}) == "ISC"

    def test_legacy_object_license(self):
        assert extract_license({"license": {"type": "MIT", "url": "https://opensource.org/licenses/MIT"}}) == "MIT"

    def test_missing_license_is_none(self):
        assert extract_license({"name": "x"}) is None
        assert extract_license({"license": ""}) is None
        assert extract_license({"license": {"url": "https://example.com"}}) is None

    def test_non_object_manifest_raises(self):
        with pytest.raises(ResolutionError):
            extract_license(["not", "a", "manifest"])
