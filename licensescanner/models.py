# -*- coding: utf-8 -*-
"""Location: ./licensescanner/models.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Pydantic models for the license scanner.

The SBOM models mirror the SPDX document returned by GitHub's
``/repos/{owner}/{repo}/dependency-graph/sbom`` endpoint. Only the fields the
scanner reads are declared; everything else is ignored.
"""

# Standard
from enum import Enum
import math
from typing import Any, List, Optional

# Third-Party
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Version string GitHub assigns to the repository's own root package.
ROOT_VERSION = "main"

# Element id given to SBOM packages that carry none.
MISSING_ELEMENT_ID = "NOTFOUND"

# License value reported by the registry when a package declares none.
UNKNOWN_LICENSE = "Unknown"

# License value recorded when no registry lookup succeeded.
NON_NPM_LICENSE = "non-NPM"

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ResolveMode(str, Enum):
    """Strategy that produced a package's license.

    Examples:
        >>> ResolveMode("npmLatestVer")
        <ResolveMode.NPM_LATEST_VERSION: 'npmLatestVer'>
        >>> ResolveMode.EXPLICIT.value
        'explicit'
    """

    EXPLICIT = "explicit"
    NPM_CURRENT_VERSION = "npmCurrVer"
    NPM_LATEST_VERSION = "npmLatestVer"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# SBOM (dependency graph) documents
# ---------------------------------------------------------------------------


class SbomPackage(BaseModel):
    """A package node of the dependency graph."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    spdx_id: Optional[str] = Field(default=None, alias="SPDXID")
    name: Optional[str] = None
    version_info: Optional[str] = Field(default=None, alias="versionInfo")
    license_concluded: Optional[str] = Field(default=None, alias="licenseConcluded")

    @property
    def is_root(self) -> bool:
        """Whether this node is the scanned repository itself.

        Returns:
            bool: True when the version is the root marker.

        Examples:
            >>> SbomPackage(name="repo", versionInfo="main").is_root
            True
            >>> SbomPackage(name="lodash", versionInfo="4.17.21").is_root
            False
        """
        return self.version_info == ROOT_VERSION


class SbomRelationship(BaseModel):
    """A relationship edge between two package nodes."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    spdx_element_id: Optional[str] = Field(default=None, alias="spdxElementId")
    related_spdx_element: Optional[str] = Field(default=None, alias="relatedSpdxElement")


class DependencyGraphDocument(BaseModel):
    """SPDX dependency graph of one repository.

    Examples:
        >>> doc = DependencyGraphDocument.model_validate({
        ...     "packages": [{"SPDXID": "SPDXRef-repo", "name": "repo", "versionInfo": "main"}],
        ...     "relationships": None,
        ... })
        >>> (len(doc.packages), doc.relationships)
        (1, [])
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    packages: List[SbomPackage] = Field(default_factory=list)
    relationships: List[SbomRelationship] = Field(default_factory=list)

    @classmethod
    def model_validate_sbom_response(cls, payload: dict) -> "DependencyGraphDocument":
        """Build a document from the GitHub SBOM endpoint body (``{"sbom": {...}}``).

        Args:
            payload: Decoded JSON body.

        Returns:
            DependencyGraphDocument: The parsed document.
        """
        return cls.model_validate(payload.get("sbom") or {})

    @field_validator("packages", "relationships", mode="before")
    @classmethod
    def null_to_empty(cls, value: Any) -> Any:
        """Treat ``null`` lists sent by the API as empty."""
        return [] if value is None else value


# ---------------------------------------------------------------------------
# Resolution results
# ---------------------------------------------------------------------------


class LicenseResolution(BaseModel):
    """License value together with the strategy that produced it.

    ``license`` is None when the registry manifest declares no license.
    """

    license: Optional[str] = None
    resolve_mode: ResolveMode


class ResolvedPackage(BaseModel):
    """A dependency with its license resolved and its transitivity classified."""

    name: str
    version: Optional[str] = None
    license: Optional[str] = None
    resolve_mode: ResolveMode
    is_transitive_dep: bool


class RepositoryScanResult(BaseModel):
    """Successful outcome of scanning one repository."""

    repo: str
    packages: List[ResolvedPackage] = Field(default_factory=list)


class RepositoryRef(BaseModel):
    """Repository descriptor returned by the organization listing."""

    model_config = ConfigDict(extra="ignore")

    name: str
    owner: str
    archived: bool = False


# ---------------------------------------------------------------------------
# Serialized findings
# ---------------------------------------------------------------------------


class RepoFinding(BaseModel):
    """One repository affected by a package version."""

    repo: str
    resolve_mode: ResolveMode
    is_transitive_dep: bool


class VersionFinding(BaseModel):
    """Repositories using a package at one version."""

    version: str
    repos: List[RepoFinding]


class LicenseFinding(BaseModel):
    """Versions of a package carrying one license."""

    license: str
    versions: List[VersionFinding]


class PackageFinding(BaseModel):
    """All findings for one package name."""

    name: str
    licenses: List[LicenseFinding]


class ScanSummary(BaseModel):
    """Counters describing one scan run.

    Examples:
        >>> ScanSummary(total=10, scanned=7, archived=2, failed=1, affected=3).affected_percentage
        30
        >>> ScanSummary(total=8, affected=1).affected_percentage
        13
        >>> ScanSummary().affected_percentage
        0
    """

    total: int = 0
    scanned: int = 0
    archived: int = 0
    failed: int = 0
    affected: int = 0

    @property
    def affected_percentage(self) -> int:
        """Share of affected repositories out of all repositories, halves rounded up.

        Returns:
            int: percentage in the range 0-100.
        """
        if self.total == 0:
            return 0
        return math.floor(self.affected / self.total * 100 + 0.5)


class FindingStatistics(BaseModel):
    """Direct/transitive breakdown derived from serialized findings."""

    direct: int = 0
    transitive: int = 0
    repos_with_direct_deps: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# GitHub resources
# ---------------------------------------------------------------------------


class GitHubAppInfo(BaseModel):
    """The authenticated GitHub App."""

    model_config = ConfigDict(extra="ignore")

    name: str
    slug: str

    @property
    def bot_login(self) -> str:
        """Login of the app's bot user, used to find issues it created.

        Returns:
            str: ``<slug>[bot]``.

        Examples:
            >>> GitHubAppInfo(name="License Scanner", slug="license-scanner").bot_login
            'license-scanner[bot]'
        """
        return f"{self.slug}[bot]"


class IssueComment(BaseModel):
    """A comment on the results issue."""

    model_config = ConfigDict(extra="ignore")

    id: int
    body: Optional[str] = None
    html_url: Optional[str] = None
