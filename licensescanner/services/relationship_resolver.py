# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/relationship_resolver.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Direct/transitive classification from SBOM relationship edges.

Only one hop is followed: a dependency is direct when its first relationship
edge points at the repository's own root node, and transitive otherwise.
No transitive closure of the graph is computed.
"""

# Standard
from typing import Dict, Iterable, Mapping, Optional

# First-Party
from licensescanner.models import SbomPackage, SbomRelationship

RelationshipMap = Dict[str, str]


def build_relationship_map(relationships: Iterable[SbomRelationship]) -> RelationshipMap:
    """Map each source element id to the first element it relates to.

    Edges missing either id are skipped. Later edges for an already mapped
    source id never override the first one.

    Args:
        relationships: Edges in document order.

    Returns:
        RelationshipMap: source element id -> related element id.

    Examples:
        >>> edges = [
        ...     SbomRelationship(spdxElementId="a", relatedSpdxElement="root"),
        ...     SbomRelationship(spdxElementId="a", relatedSpdxElement="b"),
        ...     SbomRelationship(spdxElementId="c"),
        ... ]
        >>> build_relationship_map(edges)
        {'a': 'root'}
    """
    relationship_map: RelationshipMap = {}
    for edge in relationships:
        if edge.spdx_element_id and edge.related_spdx_element and edge.spdx_element_id not in relationship_map:
            relationship_map[edge.spdx_element_id] = edge.related_spdx_element
    return relationship_map


def find_root_element_id(packages: Iterable[SbomPackage]) -> str:
    """Return the element id of the repository's own root node.

    Args:
        packages: Package nodes of the document.

    Returns:
        str: root element id, or ``""`` when the document has no root node.

    Examples:
        >>> find_root_element_id([SbomPackage(SPDXID="x", versionInfo="1.0"), SbomPackage(SPDXID="r", versionInfo="main")])
        'r'
        >>> find_root_element_id([])
        ''
    """
    root_id = ""
    for package in packages:
        if package.is_root:
            root_id = package.spdx_id or ""
    return root_id


def is_transitive(relationship_map: Mapping[str, str], element_id: Optional[str], root_id: str) -> bool:
    """Classify a dependency relative to the root node.

    Args:
        relationship_map: Output of ``build_relationship_map``.
        element_id: Element id of the dependency.
        root_id: Element id of the repository's root node.

    Returns:
        bool: True unless the dependency's first edge points at the root.

    Examples:
        >>> is_transitive({"a": "root"}, "a", "root")
        False
        >>> is_transitive({"a": "b"}, "a", "root")
        True
        >>> is_transitive({}, "a", "")
        True
    """
    related = relationship_map.get(element_id or "")
    return related is None or related != root_id
