"""
Launch and track jobs on an automation platform.

Exposes a job resource with create/read/update/delete operations built on
a launch controller and a wait-for-completion poller.
"""

from .client import AutomationClient
from .diagnostics import Diagnostic, Diagnostics, Severity
from .errors import (
    AutomationError,
    Cancelled,
    LaunchError,
    NotFound,
    ParseError,
    TimeoutExceeded,
    TransportError,
    UnexpectedStatus,
    WaitError,
)
from .job import JobRecord, JobStatus, TERMINAL_STATUSES, is_terminal_status
from .launcher import JobLauncher
from .poller import CompletionPoller, PollOutcome, PollStep
from .resource import JobResource, ResourceResponse
