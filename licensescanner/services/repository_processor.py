# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/repository_processor.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Per-repository processing: dependency graph in, resolved packages out.

A repository either yields its complete list of resolved packages or fails as
a whole with ``RepositoryProcessingError``; no partial results are emitted.
"""

# Standard
import asyncio
from typing import Awaitable, Callable, List, Optional

# First-Party
from licensescanner.errors import RepositoryProcessingError
from licensescanner.models import DependencyGraphDocument, MISSING_ELEMENT_ID, RepositoryRef, RepositoryScanResult, ResolvedPackage, SbomPackage
from licensescanner.services.license_resolver import NpmLicenseResolver
from licensescanner.services.logging_service import LoggingService
from licensescanner.services.relationship_resolver import build_relationship_map, find_root_element_id, is_transitive, RelationshipMap

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

GraphFetcher = Callable[[RepositoryRef], Awaitable[DependencyGraphDocument]]


def unique_dependencies(packages: List[SbomPackage]) -> List[SbomPackage]:
    """Drop the root node and keep the first node seen for each package name.

    Nodes without a name are skipped.

    Args:
        packages: Package nodes in document order.

    Returns:
        List[SbomPackage]: one node per dependency name.

    Examples:
        >>> nodes = [
        ...     SbomPackage(SPDXID="r", name="repo", versionInfo="main"),
        ...     SbomPackage(SPDXID="a1", name="a", versionInfo="1.0.0"),
        ...     SbomPackage(SPDXID="a2", name="a", versionInfo="2.0.0"),
        ...     SbomPackage(SPDXID="x", versionInfo="1.0.0"),
        ... ]
        >>> [p.spdx_id for p in unique_dependencies(nodes)]
        ['a1']
    """
    seen: set[str] = set()
    unique: List[SbomPackage] = []
    for package in packages:
        if package.is_root or not package.name or package.name in seen:
            continue
        seen.add(package.name)
        unique.append(package)
    return unique


class RepositoryProcessor:
    """Turn one repository's dependency graph into resolved package records."""

    def __init__(self, resolver: NpmLicenseResolver, fetch_graph: Optional[GraphFetcher] = None) -> None:
        """Initialize the processor.

        Args:
            resolver: License resolver shared across repositories.
            fetch_graph: Coroutine returning the dependency graph of a
                repository; required by ``scan``.
        """
        self.resolver = resolver
        self.fetch_graph = fetch_graph

    async def _resolve_package(self, package: SbomPackage, relationship_map: RelationshipMap, root_id: str) -> ResolvedPackage:
        """Resolve the license of one dependency and classify it.

        Args:
            package: Dependency node.
            relationship_map: One-hop relationship lookup.
            root_id: Element id of the repository root.

        Returns:
            ResolvedPackage: The classified record.
        """
        resolution = await self.resolver.resolve(package.name, package.version_info, package.license_concluded)
        return ResolvedPackage(
            name=package.name,
            version=package.version_info,
            license=resolution.license,
            resolve_mode=resolution.resolve_mode,
            is_transitive_dep=is_transitive(relationship_map, package.spdx_id, root_id),
        )

    async def process(self, document: DependencyGraphDocument, repo: str) -> RepositoryScanResult:
        """Resolve and classify every unique dependency of a repository.

        Args:
            document: The repository's dependency graph.
            repo: Repository display name.

        Returns:
            RepositoryScanResult: All resolved packages.

        Raises:
            RepositoryProcessingError: If anything fails while processing.
        """
        try:
            relationship_map = build_relationship_map(document.relationships)
            packages = [p if p.spdx_id else p.model_copy(update={"spdx_id": MISSING_ELEMENT_ID}) for p in document.packages]
            root_id = find_root_element_id(packages)

            resolved = await asyncio.gather(*(self._resolve_package(p, relationship_map, root_id) for p in unique_dependencies(packages)))
        except Exception as exc:
            logger.error("Failed to process dependency graph for repo %s: %s", repo, exc)
            raise RepositoryProcessingError(repo, str(exc)) from exc

        return RepositoryScanResult(repo=repo, packages=list(resolved))

    async def scan(self, repository: RepositoryRef) -> RepositoryScanResult:
        """Fetch a repository's dependency graph and process it.

        Args:
            repository: The repository to scan.

        Returns:
            RepositoryScanResult: All resolved packages.

        Raises:
            RepositoryProcessingError: If the graph cannot be fetched or processed.
            RuntimeError: If no graph fetcher was configured.
        """
        if self.fetch_graph is None:
            raise RuntimeError("RepositoryProcessor.scan requires a graph fetcher")

        try:
            document = await self.fetch_graph(repository)
        except Exception as exc:
            logger.error("failed to retrieve sboms for repo %s: %s", repository.name, exc)
            raise RepositoryProcessingError(repository.name, f"failed to retrieve sbom: {exc}") from exc

        return await self.process(document, repository.name)
