# -*- coding: utf-8 -*-
"""Location: ./tests/unit/licensescanner/services/test_report_publisher.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Unit tests for publishing the report to the results issue.
"""

# Standard
from unittest.mock import AsyncMock

# Third-Party
import httpx
from pydantic import ValidationError
import pytest

# First-Party
from licensescanner.models import IssueComment
from licensescanner.services.report_publisher import ReportPublisher
from licensescanner.services.report_service import ISSUE_TITLE

COMMENT_URL = "https://github.com/acme/scanner/issues/3#issuecomment-99"


def _github(issues=None, comments=None):
    github = AsyncMock()
    github.list_issues.return_value = issues if issues is not None else []
    github.create_issue.return_value = 3
    github.list_issue_comments.return_value = comments if comments is not None else []
    github.create_issue_comment.return_value = IssueComment(id=99, body="report", html_url=COMMENT_URL)
    github.update_issue_comment.return_value = IssueComment(id=99, body="report", html_url=COMMENT_URL)
    return github


def _publisher(github):
    return ReportPublisher(github, "acme", "scanner", "license-scanner[bot]")


@pytest.mark.asyncio
async def test_first_run_creates_issue_and_comment():
    github = _github()

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is True
    assert outcome.url == COMMENT_URL
    github.list_issues.assert_awaited_once_with("acme", "scanner", creator="license-scanner[bot]")
    github.create_issue.assert_awaited_once_with("acme", "scanner", ISSUE_TITLE, "body")
    github.create_issue_comment.assert_awaited_once_with("acme", "scanner", 3, "report")
    github.update_issue_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_changed_report_updates_existing_comment():
    github = _github(issues=[{"number": 5}], comments=[IssueComment(id=11, body="old report"), IssueComment(id=12, body="chatter")])

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is True
    github.create_issue.assert_not_awaited()
    github.update_issue.assert_awaited_once_with("acme", "scanner", 5, ISSUE_TITLE, "body")
    github.update_issue_comment.assert_awaited_once_with("acme", "scanner", 11, "report")
    github.create_issue_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_unchanged_report_is_not_republished(caplog):
    github = _github(issues=[{"number": 5}], comments=[IssueComment(id=11, body="report")])
    caplog.set_level("INFO", logger="licensescanner")

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is False
    assert outcome.url is None
    github.update_issue.assert_not_awaited()
    github.update_issue_comment.assert_not_awaited()
    assert "No differences found" in caplog.text


@pytest.mark.asyncio
async def test_issue_lookup_failure_is_logged_not_raised():
    github = _github()
    github.list_issues.side_effect = httpx.ConnectError("down")

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is False
    github.create_issue_comment.assert_not_awaited()


@pytest.mark.asyncio
async def test_comment_failure_is_logged_not_raised():
    github = _github(issues=[{"number": 5}])
    github.create_issue_comment.side_effect = httpx.HTTPStatusError("forbidden", request=httpx.Request("POST", "https://api.github.com"), response=httpx.Response(403))

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is False


@pytest.mark.asyncio
async def test_unreadable_comments_fall_back_to_creating_one():
    github = _github(issues=[{"number": 5}])
    github.list_issue_comments.side_effect = httpx.ReadTimeout("slow")

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is True
    github.create_issue_comment.assert_awaited_once_with("acme", "scanner", 5, "report")


@pytest.mark.asyncio
async def test_issue_without_number_is_logged_not_raised(caplog):
    github = _github(issues=[{"title": ISSUE_TITLE}])

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is False
    github.list_issue_comments.assert_not_awaited()
    assert "failed to retrieve issues" in caplog.text


@pytest.mark.asyncio
async def test_invalid_comment_body_is_logged_not_raised():
    github = _github(issues=[{"number": 5}])
    with pytest.raises(ValidationError) as exc_info:
        IssueComment.model_validate({"body": "report"})
    github.create_issue_comment.side_effect = exc_info.value

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is False
    assert outcome.url is None


@pytest.mark.asyncio
async def test_malformed_comment_listing_falls_back_to_creating_one():
    github = _github(issues=[{"number": 5}])
    github.list_issue_comments.side_effect = KeyError("id")

    outcome = await _publisher(github).publish("report", "body")

    assert outcome.published is True
    github.create_issue_comment.assert_awaited_once_with("acme", "scanner", 5, "report")
