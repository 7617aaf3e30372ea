"""
Error taxonomy for automation job operations.

Error Hierarchy:
- AutomationError: base for everything raised by this package
  - TransportError: network/connection failure or HTTP timeout
  - UnexpectedStatus: HTTP status outside the expected set (carries body)
    - NotFound: 404 on a job fetch
  - ParseError: malformed response body (carries body)
  - LaunchError: launching a job failed (chained to the cause)
  - WaitError: waiting for completion did not produce a terminal status
    - TimeoutExceeded: deadline elapsed first
    - Cancelled: caller cancelled the wait

Usage:
    from automation.errors import LaunchError, TimeoutExceeded

    try:
        record = launcher.launch(template_id=7)
    except LaunchError as e:
        logger.error(f"Launch failed: {e} (body: {e.body!r})")
"""

from typing import Optional


class AutomationError(Exception):
    """Base exception for automation platform errors."""
    pass


class TransportError(AutomationError):
    """Cannot reach the automation platform."""
    pass


class UnexpectedStatus(AutomationError):
    """Response status outside the expected set for an operation."""

    def __init__(self, status_code: int, body: bytes = b"", expected=None):
        self.status_code = status_code
        self.body = body or b""
        self.expected = tuple(int(s) for s in expected or ())
        message = f"Unexpected response status {status_code}"
        if self.expected:
            message += f" (expected {', '.join(str(s) for s in self.expected)})"
        if self.body:
            message += f": {_preview(self.body)}"
        super().__init__(message)


class NotFound(UnexpectedStatus):
    """Job object no longer exists (404)."""

    def __init__(self, body: bytes = b"", expected=None):
        super().__init__(404, body, expected)


class ParseError(AutomationError):
    """Response body could not be parsed into a job."""

    def __init__(self, message: str, body: bytes = b""):
        self.body = body or b""
        super().__init__(message)


class LaunchError(AutomationError):
    """Launching a job from a template failed."""

    def __init__(self, message: str, body: bytes = b""):
        self.body = body or b""
        super().__init__(message)


class WaitError(AutomationError):
    """Waiting for a job to finish ended without a terminal status."""

    def __init__(self, message: str, record=None):
        self.record = record
        super().__init__(message)


class TimeoutExceeded(WaitError):
    """Job did not reach a terminal status before the deadline."""

    def __init__(self, message: str, record=None, last_error: Optional[Exception] = None):
        self.last_error = last_error
        super().__init__(message, record)


class Cancelled(WaitError):
    """Caller cancelled the wait."""
    pass


def _preview(body: bytes, limit: int = 200) -> str:
    """Short, printable excerpt of a response body for error messages."""
    text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else str(body)
    text = text.strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text
