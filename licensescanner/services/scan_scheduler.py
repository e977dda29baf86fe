# -*- coding: utf-8 -*-
"""Location: ./licensescanner/services/scan_scheduler.py
Copyright 2026
SPDX-License-Identifier: Apache-2.0

Bounded-concurrency fan-out over the organization's repositories.

At most ``concurrency`` repositories are in flight at once; the rest wait on
an ``asyncio.Semaphore`` and start in submission order as slots free up. A
failing repository is counted and logged; it never cancels its siblings and
the run only completes once every repository has settled.
"""

# Standard
import asyncio
from typing import Awaitable, Callable, Sequence

# First-Party
from licensescanner.errors import RepositoryProcessingError
from licensescanner.models import RepositoryRef, RepositoryScanResult, ScanSummary
from licensescanner.services.aggregation import FindingsAggregator
from licensescanner.services.logging_service import LoggingService

logging_service = LoggingService()
logger = logging_service.get_logger(__name__)

UnitOfWork = Callable[[RepositoryRef], Awaitable[RepositoryScanResult]]

DEFAULT_CONCURRENCY = 2


class ScanScheduler:
    """Run a unit of work per repository with a fixed concurrency cap.

    Examples:
        >>> ScanScheduler(concurrency=3).concurrency
        3
        >>> ScanScheduler(concurrency=0)
        Traceback (most recent call last):
        ...
        ValueError: concurrency must be at least 1
    """

    def __init__(self, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        """Initialize the scheduler.

        Args:
            concurrency: Maximum repositories processed at once.

        Raises:
            ValueError: If concurrency is below 1.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency

    async def run(self, repositories: Sequence[RepositoryRef], work: UnitOfWork, aggregator: FindingsAggregator) -> ScanSummary:
        """Scan every repository and feed successful results to the aggregator.

        Args:
            repositories: Repositories to scan, in submission order.
            work: Coroutine scanning one repository.
            aggregator: Run-scoped findings collector.

        Returns:
            ScanSummary: The aggregator's counters once all units settled.
        """
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded_scan(repository: RepositoryRef) -> None:
            """Scan one repository inside a concurrency slot.

            Args:
                repository: The repository to scan.
            """
            async with semaphore:
                try:
                    result = await work(repository)
                except RepositoryProcessingError:
                    aggregator.record_failure(repository.name)
                    return
                except Exception as exc:
                    logger.exception("Unexpected error scanning repo %s: %s", repository.name, exc)
                    aggregator.record_failure(repository.name)
                    return
            aggregator.record_success(result)

        await asyncio.gather(*(bounded_scan(repository) for repository in repositories))

        summary = aggregator.summary
        logger.info(
            "Scanned: %d / Archived: %d / Failed: %d, out of %d total repositories.",
            summary.scanned,
            summary.archived,
            summary.failed,
            summary.total,
        )
        return summary
