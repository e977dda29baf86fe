# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/slack_notifier.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Slack notification for newly published reports.
"""

# Standard
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Third-Party
import httpx
import orjson

# First-Party
from licensescanner.models import FindingStatistics, ScanSummary
from licensescanner.services.http_client_service import get_http_client
from licensescanner.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)


def _mrkdwn(text: str) -> Dict[str, str]:
    """Build a Slack mrkdwn text object.

    Args:
        text: Message text.

    Returns:
        Dict[str, str]: text object.
    """
    return {"type": "mrkdwn", "text": text}


def build_slack_message(
    blacklisted_count: int,
    missing_count: int,
    stats: FindingStatistics,
    summary: ScanSummary,
    results_url: str,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the Block Kit payload announcing new findings.

    Args:
        blacklisted_count: Packages with blacklisted licenses.
        missing_count: Packages missing licenses.
        stats: Direct/transitive breakdown.
        summary: Run counters.
        results_url: Link to the published report.
        now: Timestamp of the alert; current UTC time when omitted.

    Returns:
        Dict[str, Any]: Slack message payload.

    Examples:
        >>> msg = build_slack_message(1, 0, FindingStatistics(), ScanSummary(total=2, affected=1), "https://x")
        >>> msg["blocks"][3]["fields"][2]["text"]
        '*Direct Dependency Problems:*\\nNone.'
        >>> msg["blocks"][3]["fields"][4]["text"]
        '*Repositories Affected:*\\n1 / 2 (50%)'
    """
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    direct_repos = "".join(f"\n- {repo}" for repo in stats.repos_with_direct_deps) if stats.repos_with_direct_deps else "None."
    return {
        "blocks": [
            {"type": "header", "text": {"type": "plain_text", "text": "\U0001f6a8 New Dependency Licensing Issues Found", "emoji": True}},
            {"type": "section", "text": _mrkdwn("`org-license-scanner` has detected new license problems for review.")},
            {"type": "divider"},
            {
                "type": "section",
                "fields": [
                    _mrkdwn(f"*Blacklisted Packages:*\n{blacklisted_count}"),
                    _mrkdwn(f"*Packages Missing Licenses:*\n{missing_count}"),
                    _mrkdwn(f"*Direct Dependency Problems:*\n{direct_repos}"),
                    _mrkdwn(f"*Transitive Dependency Problems:*\n{stats.transitive}"),
                    _mrkdwn(f"*Repositories Affected:*\n{summary.affected} / {summary.total} ({summary.affected_percentage}%)"),
                ],
            },
            {
                "type": "actions",
                "elements": [
                    {"type": "button", "text": {"type": "plain_text", "emoji": True, "text": "View In Github"}, "style": "primary", "url": results_url},
                ],
            },
            {"type": "context", "elements": [_mrkdwn(f"Alert triggered at `{timestamp}`")]},
        ]
    }


class SlackNotifier:
    """Post report notifications to a Slack incoming webhook."""

    def __init__(self, webhook_url: Optional[str], client: Optional[httpx.AsyncClient] = None) -> None:
        """Initialize the notifier.

        Args:
            webhook_url: Incoming webhook URL; notifications are skipped when unset.
            client: HTTP client to use; the shared client when omitted.
        """
        self.webhook_url = webhook_url
        self._client = client

    async def notify(self, message: Dict[str, Any], results_url: Optional[str]) -> bool:
        """Send the message if both a results link and a webhook are available.

        Args:
            message: Block Kit payload.
            results_url: Link to the published report.

        Returns:
            bool: True when Slack accepted the message.
        """
        if not results_url:
            logger.debug("No Github link available, skipping Slack notification.")
            return False
        if not self.webhook_url:
            logger.debug("No Slack webhook link available, skipping Slack notification.")
            return False

        client = self._client or await get_http_client()
        try:
            response = await client.post(self.webhook_url, content=orjson.dumps(message), headers={"Content-Type": "application/json"})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Failed to notify Slack: %s", exc)
            return False

        logger.debug("Notified Slack.")
        return True
