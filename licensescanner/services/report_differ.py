# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/report_differ.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Idempotence gate for report publishing.

A report is only republished when its text changed since the last run, so an
unchanged organization does not produce a stream of identical updates.
"""

# Standard
import hashlib
from typing import Optional


def content_digest(text: str) -> str:
    """Return a stable digest of the report text.

    Args:
        text: Report text.

    Returns:
        str: hex SHA-256 digest of the UTF-8 encoded text.

    Examples:
        >>> content_digest("") == hashlib.sha256(b"").hexdigest()
        True
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def needs_publish(previous: Optional[str], current: str) -> bool:
    """Decide whether the new report must be published.

    Args:
        previous: Previously published report text; None on the first run.
        current: Newly rendered report text.

    Returns:
        bool: True when no previous report exists or the digests differ.

    Examples:
        >>> needs_publish(None, "report")
        True
        >>> needs_publish("report", "report")
        False
        >>> needs_publish("report", "reporT")
        True
    """
    if previous is None:
        return True
    return content_digest(previous) != content_digest(current)
