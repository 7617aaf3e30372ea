"""
Wait for a launched job to reach a terminal status.

Polling is a bounded tenacity retry loop:
- each attempt fetches the job once and classifies the result (PollStep)
- fetch failures and non-terminal statuses are retried
- the first terminal status ends the loop
- the deadline raises TimeoutExceeded, never success
- a cancel event interrupts the backoff sleep and raises Cancelled

Each attempt receives the snapshot produced by the previous one and returns
a new one; records are never mutated.

Usage:
    from automation.poller import CompletionPoller

    poller = CompletionPoller(client)
    record = poller.wait(record, timeout_seconds=120)
    print(record.status)  # successful / failed / error / canceled
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, wait_exponential

from automation.client import AutomationClient
from automation.errors import Cancelled, TimeoutExceeded, TransportError, UnexpectedStatus
from automation.job import JobRecord, parse_job_payload

logger = logging.getLogger(__name__)

# Lower bound for the per-fetch HTTP timeout
MIN_REQUEST_TIMEOUT = 1.0


class PollOutcome(str, Enum):
    """Classification of one poll attempt."""
    COMPLETE = "complete"        # terminal status observed
    PENDING = "pending"          # job still running
    UNREACHABLE = "unreachable"  # fetch failed


@dataclass(frozen=True)
class PollStep:
    """Result of one poll attempt: the new snapshot and its classification."""
    record: JobRecord
    outcome: PollOutcome
    error: Optional[Exception] = None

    @property
    def retryable(self) -> bool:
        return self.outcome is not PollOutcome.COMPLETE


class CompletionPoller:
    """
    Polls a job's URL until the job finishes.

    Attributes:
        client: Shared API client
        interval: First backoff delay in seconds
        max_interval: Backoff ceiling in seconds
        request_timeout: Per-fetch HTTP timeout ceiling in seconds
    """

    def __init__(
        self,
        client: AutomationClient,
        interval: float = 1.0,
        max_interval: float = 10.0,
        request_timeout: Optional[float] = None,
        sleep: Optional[Callable[[float], object]] = None,
    ):
        """
        Initialize the poller.

        Args:
            client: API client used for status fetches
            interval: First delay between attempts (default: 1s)
            max_interval: Maximum delay between attempts (default: 10s)
            request_timeout: Per-fetch timeout ceiling (default: client.timeout)
            sleep: Replacement for the cancel-aware sleep (tests)
        """
        self.client = client
        self.interval = interval
        self.max_interval = max_interval
        self.request_timeout = request_timeout if request_timeout is not None else client.timeout
        self._sleep = sleep

    @classmethod
    def from_settings(cls, client: AutomationClient, settings=None) -> "CompletionPoller":
        if settings is None:
            from config.settings import get_settings
            settings = get_settings()
        return cls(
            client,
            interval=settings.jobs.poll_interval_seconds,
            max_interval=settings.jobs.poll_max_interval_seconds,
            request_timeout=settings.api.request_timeout,
        )

    def poll_once(
        self,
        record: JobRecord,
        timeout: Optional[float] = None,
        correlation_id: str = "",
    ) -> PollStep:
        """
        Fetch the job once.

        Fetch failures are returned as UNREACHABLE steps carrying the
        previous snapshot. A malformed body raises ParseError.
        """
        log_prefix = f"[{correlation_id}] " if correlation_id else ""

        try:
            body = self.client.fetch(record.url, timeout=timeout, correlation_id=correlation_id)
        except (TransportError, UnexpectedStatus) as e:
            logger.warning(f"{log_prefix}Error fetching status of job {record.url}: {e}")
            return PollStep(record, PollOutcome.UNREACHABLE, e)

        refreshed = record.refreshed(parse_job_payload(body))
        logger.info(
            f"{log_prefix}Job {refreshed.url} (template {refreshed.template_id}), "
            f"current status: {refreshed.status}",
            extra={"correlation_id": correlation_id, "job_url": refreshed.url,
                   "template_id": refreshed.template_id,
                   "status": refreshed.status},
        )

        if refreshed.is_terminal:
            return PollStep(refreshed, PollOutcome.COMPLETE)
        return PollStep(refreshed, PollOutcome.PENDING)

    def wait(
        self,
        record: JobRecord,
        timeout_seconds: float,
        cancel_event: Optional[threading.Event] = None,
        correlation_id: str = "",
    ) -> JobRecord:
        """
        Block until the job reaches a terminal status.

        Args:
            record: Launched job (must have a URL)
            timeout_seconds: Deadline for the whole wait
            cancel_event: Set from another thread to abort the wait
            correlation_id: For log tracing

        Returns:
            Refreshed record with a terminal status

        Raises:
            TimeoutExceeded: Deadline elapsed without a terminal status
            Cancelled: cancel_event was set
            ParseError: A status response could not be parsed
        """
        if not record.url:
            raise ValueError("Cannot wait for a job that has no URL")

        log_prefix = f"[{correlation_id}] " if correlation_id else ""
        cancel_event = cancel_event or threading.Event()
        fetch_timeout = min(self.request_timeout, max(timeout_seconds, MIN_REQUEST_TIMEOUT))

        retrying = Retrying(
            stop=stop_after_delay(timeout_seconds),
            wait=self._backoff(timeout_seconds),
            retry=retry_if_result(lambda step: step.retryable),
            sleep=self._sleep or cancel_event.wait,
        )

        logger.info(f"{log_prefix}Waiting up to {timeout_seconds}s for job {record.url} to finish")
        snapshot = record
        try:
            for attempt in retrying:
                with attempt:
                    if cancel_event.is_set():
                        raise Cancelled(f"Wait for job {snapshot.url} was cancelled", snapshot)
                    step = self.poll_once(snapshot, timeout=fetch_timeout, correlation_id=correlation_id)
                    snapshot = step.record
                if not attempt.retry_state.outcome.failed:
                    attempt.retry_state.set_result(step)
        except RetryError as e:
            last_step = e.last_attempt.result()
            raise TimeoutExceeded(
                f"Job {last_step.record.url} did not reach a final state within "
                f"{timeout_seconds}s (last status: {last_step.record.status or 'unknown'})",
                record=last_step.record,
                last_error=last_step.error,
            ) from e

        logger.info(f"{log_prefix}Job {snapshot.url} finished with status: {snapshot.status}")
        return snapshot

    def _backoff(self, timeout_seconds: float):
        """Exponential backoff, never sleeping past the deadline."""
        backoff = wait_exponential(multiplier=self.interval, min=self.interval, max=self.max_interval)

        def wait(retry_state) -> float:
            remaining = timeout_seconds - (retry_state.seconds_since_start or 0.0)
            return max(0.0, min(backoff(retry_state), remaining))

        return wait
