# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/aggregation.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Aggregation of findings across repositories.

``AggregationStore`` groups affected repositories by package name, license
and version. Entries are kept under one flat composite key and only sorted
when serialized, so the serialized form is identical whatever order the
repositories finished scanning in.

``FindingsAggregator`` is the run-scoped owner of the two stores (blacklisted
and missing licenses) and of the run counters. Inserts are plain synchronous
calls: under the asyncio event loop no other task can interleave between the
key lookup and the append.
"""

# Standard
from itertools import groupby
from typing import Dict, Iterable, List, Tuple

# First-Party
from licensescanner.config import ScanPolicy
from licensescanner.models import LicenseFinding, PackageFinding, RepoFinding, RepositoryScanResult, ResolvedPackage, ScanSummary, UNKNOWN_LICENSE, VersionFinding
from licensescanner.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

FindingKey = Tuple[str, str, str]


class AggregationStore:
    """name -> license -> version -> repositories, stored as one flat map.

    Examples:
        >>> from licensescanner.models import ResolveMode
        >>> store = AggregationStore()
        >>> pkg = ResolvedPackage(name="a", version="1.0", license="GPL-3.0", resolve_mode=ResolveMode.EXPLICIT, is_transitive_dep=False)
        >>> store.insert("repo-b", pkg)
        >>> store.insert("repo-a", pkg)
        >>> [r.repo for r in store.serialize()[0].licenses[0].versions[0].repos]
        ['repo-a', 'repo-b']
    """

    def __init__(self) -> None:
        """Create an empty store."""
        self._entries: Dict[FindingKey, List[RepoFinding]] = {}
        self._frozen = False

    def __len__(self) -> int:
        """Number of distinct (name, license, version) keys.

        Returns:
            int: key count.
        """
        return len(self._entries)

    @property
    def frozen(self) -> bool:
        """Whether the store has been frozen for serialization.

        Returns:
            bool: True once ``freeze`` was called.
        """
        return self._frozen

    def freeze(self) -> None:
        """Make the store read-only."""
        self._frozen = True

    def insert(self, repo: str, package: ResolvedPackage) -> None:
        """Record that ``repo`` uses ``package``.

        Args:
            repo: Repository name.
            package: The resolved package.

        Raises:
            RuntimeError: If the store is frozen.
        """
        if self._frozen:
            raise RuntimeError("AggregationStore is frozen")
        key = (package.name, package.license, package.version or "")
        self._entries.setdefault(key, []).append(RepoFinding(repo=repo, resolve_mode=package.resolve_mode, is_transitive_dep=package.is_transitive_dep))

    def serialize(self) -> List[PackageFinding]:
        """Produce the nested, fully sorted representation.

        Packages sort by name, then license, then version; repositories sort
        by name.

        Returns:
            List[PackageFinding]: sorted findings.
        """
        ordered = sorted(self._entries.items(), key=lambda item: item[0])
        findings: List[PackageFinding] = []
        for name, by_name in groupby(ordered, key=lambda item: item[0][0]):
            licenses: List[LicenseFinding] = []
            for license_id, by_license in groupby(by_name, key=lambda item: item[0][1]):
                versions = [
                    VersionFinding(version=key[2], repos=sorted(repos, key=lambda r: (r.repo, r.resolve_mode.value, r.is_transitive_dep)))
                    for key, repos in by_license
                ]
                licenses.append(LicenseFinding(license=license_id, versions=versions))
            findings.append(PackageFinding(name=name, licenses=licenses))
        return findings


class FindingsAggregator:
    """Run-scoped collector of findings and counters."""

    def __init__(self, policy: ScanPolicy, total: int = 0, archived: int = 0) -> None:
        """Initialize an empty aggregation for one run.

        Args:
            policy: Blacklist and ignore rules.
            total: Number of repositories in the organization.
            archived: Number of archived repositories skipped before scanning.
        """
        self.policy = policy
        self.blacklist_store = AggregationStore()
        self.missing_license_store = AggregationStore()
        self.summary = ScanSummary(total=total, archived=archived)

    def classify(self, repo: str, packages: Iterable[ResolvedPackage]) -> bool:
        """Sort a repository's packages into the blacklist and missing-license stores.

        Packages matching an ignore pattern are skipped. A blacklisted license
        wins over ``Unknown``, so no package lands in both stores. Packages whose
        registry manifest declares no license are not recorded.

        Args:
            repo: Repository name.
            packages: The repository's resolved packages.

        Returns:
            bool: True when at least one package was recorded.
        """
        affected = False
        for package in packages:
            if self.policy.is_ignored(package.name):
                continue
            if self.policy.is_blacklisted(package.license):
                self.blacklist_store.insert(repo, package)
                affected = True
            elif package.license == UNKNOWN_LICENSE:
                self.missing_license_store.insert(repo, package)
                affected = True
        if affected:
            self.summary.affected += 1
        return affected

    def record_success(self, result: RepositoryScanResult) -> None:
        """Count a scanned repository and classify its packages.

        Args:
            result: The repository's scan result.
        """
        self.summary.scanned += 1
        logger.debug("Scanned repo %d / %d: %s", self.settled, self.summary.total, result.repo)
        self.classify(result.repo, result.packages)

    def record_failure(self, repo: str) -> None:
        """Count a repository that failed to scan.

        Args:
            repo: Repository name.
        """
        self.summary.failed += 1
        logger.error("failed to scan repo %s", repo)

    @property
    def settled(self) -> int:
        """Repositories accounted for so far, archived ones included.

        Returns:
            int: scanned + failed + archived.
        """
        return self.summary.scanned + self.summary.failed + self.summary.archived

    def serialize(self) -> Tuple[List[PackageFinding], List[PackageFinding]]:
        """Freeze both stores and serialize them.

        Returns:
            Tuple[List[PackageFinding], List[PackageFinding]]: blacklisted and
            missing-license findings.
        """
        self.blacklist_store.freeze()
        self.missing_license_store.freeze()
        return self.blacklist_store.serialize(), self.missing_license_store.serialize()
