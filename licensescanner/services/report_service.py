# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/report_service.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Markdown rendering of serialized findings.

Everything here is a pure function of the serialized arrays, so identical
findings always render to identical text and the report differ can compare
runs byte for byte.
"""

# Standard
from typing import List, Literal

# First-Party
from licensescanner.models import FindingStatistics, PackageFinding, RepoFinding, ResolveMode, ScanSummary

Category = Literal["blacklisted", "missing"]

ISSUE_TITLE = "Org License Scanner Results"

_CATEGORY_ACTION = {"blacklisted": "remove", "missing": "review"}


def summarize_findings(*finding_sets: List[PackageFinding]) -> FindingStatistics:
    """Count direct and transitive problems across serialized findings.

    Args:
        *finding_sets: Serialized findings (blacklisted, missing, ...).

    Returns:
        FindingStatistics: direct/transitive counts and the sorted
        repositories having at least one direct problem.
    """
    stats = FindingStatistics()
    direct_repos: set[str] = set()
    for findings in finding_sets:
        for package in findings:
            for license_finding in package.licenses:
                for version in license_finding.versions:
                    for entry in version.repos:
                        if entry.is_transitive_dep:
                            stats.transitive += 1
                        else:
                            stats.direct += 1
                            direct_repos.add(entry.repo)
    stats.repos_with_direct_deps = sorted(direct_repos)
    return stats


def render_repo_line(entry: RepoFinding, org_url: str) -> str:
    """Render one affected repository.

    Registry-resolved licenses are tagged with their resolve mode so readers
    know the value is a guess.

    Args:
        entry: The affected repository.
        org_url: Organization URL used to link the repository.

    Returns:
        str: Markdown list item.

    Examples:
        >>> line = render_repo_line(RepoFinding(repo="api", resolve_mode=ResolveMode.NPM_LATEST_VERSION, is_transitive_dep=True), "https://github.com/acme")
        >>> line
        '  - [```api```](https://github.com/acme/api) (indirect) (npmLatestVer)'
    """
    repo_link = f"  - [```{entry.repo}```]({org_url}/{entry.repo})"
    transitive_tag = "indirect" if entry.is_transitive_dep else "direct"
    resolve_tag = "" if entry.resolve_mode in (ResolveMode.FAILED, ResolveMode.EXPLICIT) else f" ({entry.resolve_mode.value})"
    return f"{repo_link} ({transitive_tag}){resolve_tag}"


def render_package_rows(package: PackageFinding, org_url: str) -> List[str]:
    """Render the table rows of one package, one row per license.

    Args:
        package: Findings for the package.
        org_url: Organization URL.

    Returns:
        List[str]: Markdown table rows.
    """
    rows = []
    for idx, license_finding in enumerate(package.licenses):
        versions = ",<br>".join(f"@ {version.version}:<br>" + ",<br>".join(render_repo_line(entry, org_url) for entry in version.repos) for version in license_finding.versions)
        name_cell = f"| ```{package.name}``` |" if idx == 0 else "| |"
        rows.append(f"{name_cell} {license_finding.license} | {versions} |")
    return rows


def render_category(category: Category, findings: List[PackageFinding], org_url: str) -> str:
    """Render the section for one finding category.

    Args:
        category: ``blacklisted`` or ``missing``.
        findings: Serialized findings of that category.
        org_url: Organization URL.

    Returns:
        str: Markdown section.
    """
    rows = "\n".join(row for package in findings for row in render_package_rows(package, org_url))
    return (
        f"### Dependencies with {category} licenses\n"
        "| Package Name | License | Repositories Affected |\n"
        "| --- | --- | --- |\n"
        f"{rows}\n\n"
        f"Please {_CATEGORY_ACTION[category]} these dependencies."
    )


def render_report(blacklisted: List[PackageFinding], missing: List[PackageFinding], org_url: str) -> str:
    """Render the full report comment.

    Args:
        blacklisted: Serialized blacklisted-license findings.
        missing: Serialized missing-license findings.
        org_url: Organization URL.

    Returns:
        str: Markdown report, empty when there are no findings.

    Examples:
        >>> render_report([], [], "https://github.com/acme")
        ''
    """
    sections = []
    if blacklisted:
        sections.append(render_category("blacklisted", blacklisted, org_url))
    if missing:
        sections.append(render_category("missing", missing, org_url))
    return "\n\n".join(sections)


def render_issue_body(stats: FindingStatistics, summary: ScanSummary) -> str:
    """Render the body of the results issue.

    The scan summary tells readers how complete the report is: failed
    repositories contribute no findings and are not clean.

    Args:
        stats: Direct/transitive breakdown.
        summary: Run counters.

    Returns:
        str: Markdown issue body.

    Examples:
        >>> print(render_issue_body(FindingStatistics(direct=1, transitive=2), ScanSummary(total=4, scanned=2, archived=1, failed=1)))
        ```org-license-scanner``` has detected 1 direct, 2 transitive dependency problems:
        <BLANKLINE>
        Scanned: 2 / Archived: 1 / Failed: 1, out of 4 total repositories.
    """
    return (
        f"```org-license-scanner``` has detected {stats.direct} direct, {stats.transitive} transitive dependency problems:\n\n"
        f"Scanned: {summary.scanned} / Archived: {summary.archived} / Failed: {summary.failed}, out of {summary.total} total repositories."
    )
