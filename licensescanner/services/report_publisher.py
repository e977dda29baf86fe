# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/report_publisher.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Publishing of the report to the app's own repository.

The app keeps a single issue ("Org License Scanner Results") whose first
comment holds the latest report. The comment is only rewritten when the
report text changed; publishing failures are logged and never abort the run.
"""

# Standard
from typing import Optional

# Third-Party
import httpx
from pydantic import BaseModel

# First-Party
from licensescanner.models import IssueComment
from licensescanner.services.github_client import GitHubClient
from licensescanner.services.logging_service import LoggingService
from licensescanner.services.report_differ import needs_publish
from licensescanner.services.report_service import ISSUE_TITLE

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


class PublishOutcome(BaseModel):
    """Result of a publish attempt.

    Attributes:
        published: Whether the report comment was written.
        url: Link to the report comment, when available.
    """

    published: bool = False
    url: Optional[str] = None


class ReportPublisher:
    """Create or update the results issue and its report comment."""

    def __init__(self, github: GitHubClient, owner: str, repo: str, bot_login: str) -> None:
        """Initialize the publisher.

        Args:
            github: Authenticated GitHub client.
            owner: Owner of the app repository.
            repo: Name of the app repository.
            bot_login: Login of the app's bot user.
        """
        self.github = github
        self.owner = owner
        self.repo = repo
        self.bot_login = bot_login

    async def _ensure_issue(self, issue_body: str) -> Optional[int]:
        """Return the app's results issue, creating it when missing.

        The repository is expected to hold no user-created issues, so the
        first issue authored by the bot is the results issue.

        Args:
            issue_body: Body used when the issue has to be created.

        Returns:
            Optional[int]: issue number, None when it could not be obtained.
        """
        try:
            issues = await self.github.list_issues(self.owner, self.repo, creator=self.bot_login)
            if issues:
                return int(issues[0]["number"])
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as exc:
            logger.error("failed to retrieve issues for the gh app's repository: %s", exc)
            return None

        try:
            return await self.github.create_issue(self.owner, self.repo, ISSUE_TITLE, issue_body)
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("failed to create / update issue in the gh app's repository: %s", exc)
            return None

    async def _first_comment(self, issue_number: int) -> Optional[IssueComment]:
        """Return the oldest comment of the issue.

        Args:
            issue_number: The results issue.

        Returns:
            Optional[IssueComment]: the comment, None when absent or unreadable.
        """
        try:
            comments = await self.github.list_issue_comments(self.owner, self.repo, issue_number)
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("failed to retrieve comments for issue %s: %s", issue_number, exc)
            return None
        return comments[0] if comments else None

    async def publish(self, report: str, issue_body: str) -> PublishOutcome:
        """Publish the report unless it is unchanged since the last run.

        Args:
            report: Rendered report (comment body).
            issue_body: Rendered issue body.

        Returns:
            PublishOutcome: whether the comment was written and its URL.
        """
        issue_number = await self._ensure_issue(issue_body)
        if issue_number is None:
            logger.error("Results failed to export: no results issue available.")
            return PublishOutcome()

        existing = await self._first_comment(issue_number)
        if existing is not None and existing.body and not needs_publish(existing.body, report):
            logger.info("No differences found, skipping comment export step.")
            return PublishOutcome()

        try:
            await self.github.update_issue(self.owner, self.repo, issue_number, ISSUE_TITLE, issue_body)
            if existing is not None:
                comment = await self.github.update_issue_comment(self.owner, self.repo, existing.id, report)
            else:
                comment = await self.github.create_issue_comment(self.owner, self.repo, issue_number, report)
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.error("failed to create / update comment in the gh app's repository: %s", exc)
            logger.info("Results failed to export.")
            return PublishOutcome()

        logger.info("Exported results to the github app's repository.")
        return PublishOutcome(published=True, url=comment.html_url)
