"""
Job record data model and job status vocabulary.

JobRecord is immutable: every status fetch produces a new record via
refreshed(), so no state is shared between poll attempts.
"""

import json
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from automation.errors import ParseError
from automation.extra_vars import extra_vars_equal, validate_extra_vars
from automation.ignored_fields import IGNORED_FIELD_ALIASES, report_ignored_fields

DEFAULT_INVENTORY_ID = 1
WAIT_TIMEOUT_DEFAULT = 120


class JobStatus(str, Enum):
    """Job states reported by the platform."""
    NEW = "new"
    PENDING = "pending"
    WAITING = "waiting"
    RUNNING = "running"
    SUCCESSFUL = "successful"
    FAILED = "failed"
    ERROR = "error"
    CANCELED = "canceled"


TERMINAL_STATUSES = frozenset({
    JobStatus.SUCCESSFUL.value,
    JobStatus.FAILED.value,
    JobStatus.ERROR.value,
    JobStatus.CANCELED.value,
})


def is_terminal_status(status: str) -> bool:
    """
    True if a job in this state can no longer transition.

    Unknown states count as non-terminal so that polling continues
    through statuses newer platform versions may add.
    """
    return status in TERMINAL_STATUSES


class JobPayload(BaseModel):
    """Job body as returned by the launch and job detail endpoints."""

    model_config = ConfigDict(extra="ignore")

    job_template: int = 0
    job_type: str = ""
    url: str = ""
    status: str = ""
    inventory: int = 0
    extra_vars: Optional[Any] = None
    ignored_fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("job_template", "job_type", "url", "status", "inventory", "ignored_fields", mode="before")
    @classmethod
    def _null_as_default(cls, value, info):
        # JSON null reads the same as an absent key
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value


def parse_job_payload(body: bytes) -> JobPayload:
    """
    Decode a job response body.

    Raises:
        ParseError: Body is not a JSON object or has mistyped fields
    """
    try:
        data = json.loads(body)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Error parsing JSON response: {e}", body) from e

    if not isinstance(data, dict):
        raise ParseError(
            f"Error parsing JSON response: expected an object, got {type(data).__name__}",
            body,
        )

    try:
        return JobPayload.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Error parsing job response: {e}", body) from e


class JobRecord(BaseModel):
    """State of one job launched from a job template."""

    model_config = ConfigDict(frozen=True)

    # Configuration
    template_id: int
    inventory_id: Optional[int] = None
    extra_vars: Optional[str] = None
    triggers: Optional[Dict[str, str]] = None
    wait_for_completion: bool = False
    wait_for_completion_timeout_seconds: int = WAIT_TIMEOUT_DEFAULT
    destroy_job_template_id: Optional[int] = None

    # Reported by the platform
    job_type: str = ""
    status: str = ""
    url: str = ""
    ignored_fields: Optional[Tuple[str, ...]] = None

    @field_validator("extra_vars")
    @classmethod
    def _check_extra_vars(cls, value):
        return validate_extra_vars(value)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "JobRecord":
        """
        Build a record from user configuration.

        Unset attributes arrive as None and take their defaults.

        Raises:
            pydantic.ValidationError: Missing template id or invalid extra_vars
        """
        return cls.model_validate({k: v for k, v in config.items() if v is not None})

    @property
    def is_terminal(self) -> bool:
        return is_terminal_status(self.status)

    def refreshed(
        self,
        payload: JobPayload,
        aliases: Mapping[str, str] = IGNORED_FIELD_ALIASES,
    ) -> "JobRecord":
        """
        Return a copy updated from a platform response.

        The job URL is only taken from the payload while the record has none;
        once assigned by a launch it never changes.
        """
        return self.model_copy(update={
            "url": self.url or payload.url,
            "job_type": payload.job_type,
            "status": payload.status,
            "template_id": payload.job_template or self.template_id,
            "inventory_id": payload.inventory or self.inventory_id,
            "ignored_fields": report_ignored_fields(payload.ignored_fields, aliases),
        })

    def requires_relaunch(self, other: "JobRecord") -> bool:
        """True if ``other`` configures a different job than this record."""
        return (
            self.template_id != other.template_id
            or (self.inventory_id or DEFAULT_INVENTORY_ID) != (other.inventory_id or DEFAULT_INVENTORY_ID)
            or not extra_vars_equal(self.extra_vars, other.extra_vars)
            or (self.triggers or {}) != (other.triggers or {})
        )

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["ignored_fields"] = list(self.ignored_fields) if self.ignored_fields else None
        return data
