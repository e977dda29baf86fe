#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Location: ./licensescanner/main.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Org License Scanner entry point.

One run authenticates as the GitHub App, scans every non-archived repository
of the organization, renders the findings and, if they changed since the
last run, updates the results issue and pings Slack.

Usage:
    python -m licensescanner [--policy-file config.yml] [--dry-run] [--debug]
"""

# Standard
import argparse
import asyncio
import sys
from typing import List, Optional, Sequence

# Third-Party
from pydantic import BaseModel, Field

# First-Party
from licensescanner.config import get_settings, load_policy, ScanPolicy, Settings
from licensescanner.errors import ConfigurationError, LicenseScannerError, NoRepositoriesFoundError, ScanTimeoutError
from licensescanner.models import PackageFinding, RepositoryRef, ScanSummary
from licensescanner.services.aggregation import FindingsAggregator
from licensescanner.services.github_client import GitHubClient
from licensescanner.services.http_client_service import SharedHttpClient
from licensescanner.services.license_resolver import NpmLicenseResolver
from licensescanner.services.logging_service import LoggingService
from licensescanner.services.report_publisher import ReportPublisher
from licensescanner.services.report_service import render_issue_body, render_report, summarize_findings
from licensescanner.services.repository_processor import RepositoryProcessor
from licensescanner.services.scan_scheduler import ScanScheduler
from licensescanner.services.slack_notifier import build_slack_message, SlackNotifier

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class ScanOutcome(BaseModel):
    """Everything a run produced."""

    summary: ScanSummary
    blacklisted: List[PackageFinding] = Field(default_factory=list)
    missing: List[PackageFinding] = Field(default_factory=list)
    report: str = ""
    published: bool = False
    results_url: Optional[str] = None


def split_archived(repositories: Sequence[RepositoryRef]) -> tuple[List[RepositoryRef], List[RepositoryRef]]:
    """Separate archived repositories, which have no dependency graph endpoint.

    Args:
        repositories: All organization repositories.

    Returns:
        tuple[List[RepositoryRef], List[RepositoryRef]]: (scannable, archived).

    Examples:
        >>> valid, archived = split_archived([RepositoryRef(name="a", owner="o"), RepositoryRef(name="b", owner="o", archived=True)])
        >>> [r.name for r in valid], [r.name for r in archived]
        (['a'], ['b'])
    """
    valid: List[RepositoryRef] = []
    archived: List[RepositoryRef] = []
    for repository in repositories:
        if repository.archived:
            logger.debug("Skipping repo %s, reason: archived", repository.name)
            archived.append(repository)
        else:
            valid.append(repository)
    return valid, archived


def find_app_repository(repositories: Sequence[RepositoryRef], name: str) -> RepositoryRef:
    """Locate the repository hosting the results issue.

    Args:
        repositories: All organization repositories.
        name: Name of the app repository.

    Returns:
        RepositoryRef: The app repository.

    Raises:
        ConfigurationError: If the repository is not part of the organization.
    """
    for repository in repositories:
        if repository.name == name:
            return repository
    raise ConfigurationError("this github app's repository is not within the organisation!")


async def run_scan(settings: Settings, policy: ScanPolicy, dry_run: bool = False, github: Optional[GitHubClient] = None, resolver: Optional[NpmLicenseResolver] = None) -> ScanOutcome:
    """Execute one full scan.

    Args:
        settings: Runtime settings.
        policy: License policy.
        dry_run: Render the report without publishing or notifying.
        github: Pre-built GitHub client (tests); built from settings when omitted.
        resolver: Pre-built license resolver (tests); built from settings when omitted.

    Returns:
        ScanOutcome: run counters, findings and publishing result.

    Raises:
        ConfigurationError: If credentials or the organization context are
            missing, or a report is to be published and the app repository is
            not part of the organization.
        AuthenticationError: If the GitHub App cannot authenticate.
        NoRepositoriesFoundError: If the organization has no repositories.
        ScanTimeoutError: If the fan-out exceeds ``SCAN_TIMEOUT_SECONDS``.
    """
    settings.require_credentials()
    org_name = settings.org_name

    if github is None:
        github = GitHubClient(settings.github_api_url)
    app = await github.authenticate_app(settings.gh_app_id, settings.app_private_key, settings.gh_org_installation_id)

    repositories = await github.list_org_repositories(org_name)
    if not repositories:
        raise NoRepositoriesFoundError(f"failed to retrieve repos for org {org_name}")

    valid, archived = split_archived(repositories)
    aggregator = FindingsAggregator(policy, total=len(repositories), archived=len(archived))
    processor = RepositoryProcessor(resolver or NpmLicenseResolver(settings.npm_registry_url), fetch_graph=github.get_dependency_graph)
    scheduler = ScanScheduler(concurrency=settings.scan_concurrency)

    fan_out = scheduler.run(valid, processor.scan, aggregator)
    if settings.scan_timeout_seconds:
        try:
            summary = await asyncio.wait_for(fan_out, timeout=settings.scan_timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise ScanTimeoutError(f"scan did not finish within {settings.scan_timeout_seconds}s") from exc
    else:
        summary = await fan_out

    blacklisted, missing = aggregator.serialize()
    report = render_report(blacklisted, missing, settings.gh_org_url)
    outcome = ScanOutcome(summary=summary, blacklisted=blacklisted, missing=missing, report=report)

    if not report:
        logger.info("No problems detected.")
        return outcome

    logger.debug("%s", report)
    if dry_run:
        logger.info("Dry run, skipping export of %d blacklisted and %d missing-license packages.", len(blacklisted), len(missing))
        return outcome

    app_repository = find_app_repository(repositories, settings.gh_app_repository_name)
    stats = summarize_findings(blacklisted, missing)
    publisher = ReportPublisher(github, app_repository.owner, app_repository.name, app.bot_login)
    result = await publisher.publish(report, render_issue_body(stats, summary))
    outcome.published = result.published
    outcome.results_url = result.url

    if result.published:
        message = build_slack_message(len(blacklisted), len(missing), stats, summary, result.url or "")
        await SlackNotifier(settings.slack_webhook_url).notify(message, result.url)

    return outcome


async def _run(settings: Settings, policy: ScanPolicy, dry_run: bool) -> ScanOutcome:
    """Run a scan and release the shared HTTP client afterwards.

    Args:
        settings: Runtime settings.
        policy: License policy.
        dry_run: Skip publishing.

    Returns:
        ScanOutcome: the run's outcome.
    """
    try:
        return await run_scan(settings, policy, dry_run=dry_run)
    finally:
        await SharedHttpClient.shutdown()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run CLI entrypoint.

    Args:
        argv: Command line arguments (defaults to ``sys.argv[1:]``).

    Returns:
        int: Process exit code (`0` success, `1` on a fatal scanner error).
    """
    parser = argparse.ArgumentParser(description="Scan a GitHub organization for dependencies with blacklisted or unknown licenses.")
    parser.add_argument("--policy-file", help="YAML policy file with 'blacklist' and 'ignorePackagesRegex' (default: POLICY_FILE or config.yml)")
    parser.add_argument("--dry-run", action="store_true", help="Scan and render the report without publishing it")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (same as RUNNER_DEBUG=1)")
    args = parser.parse_args(argv)

    settings = get_settings()
    debug = args.debug or settings.runner_debug
    logging_service.configure(level=settings.log_level, debug=debug)

    try:
        policy = load_policy(args.policy_file or settings.policy_file)
        logger.debug("Configuration for run: debug=%s, concurrency=%d", debug, settings.scan_concurrency)
        asyncio.run(_run(settings, policy, args.dry_run))
    except LicenseScannerError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
