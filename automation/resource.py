"""
Job resource lifecycle: create, read, update and delete.

A job is launched only when the resource is created or changed. Delete
never removes the job from the platform; it only drops the resource,
optionally launching a cleanup job template first.

Usage:
    from automation.job import JobRecord
    from automation.resource import JobResource

    resource = JobResource.from_settings()
    plan = JobRecord.from_config({"template_id": 7, "wait_for_completion": True})
    response = resource.create(plan)
    if response.diagnostics.has_error():
        ...
    state = response.state
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional

from automation.client import AutomationClient
from automation.diagnostics import Diagnostics
from automation.errors import (
    LaunchError,
    ParseError,
    TransportError,
    UnexpectedStatus,
    WaitError,
)
from automation.job import WAIT_TIMEOUT_DEFAULT, JobRecord, parse_job_payload
from automation.launcher import JobLauncher
from automation.poller import CompletionPoller

logger = logging.getLogger(__name__)

TYPE_NAME_SUFFIX = "_job"

# Configuration attributes carried from the plan onto launched records
_CONFIG_FIELDS = (
    "extra_vars",
    "triggers",
    "wait_for_completion",
    "wait_for_completion_timeout_seconds",
    "destroy_job_template_id",
)

SCHEMA: Dict[str, Dict[str, Any]] = {
    "template_id": {
        "type": "int", "required": True,
        "description": "Id of the job template.",
    },
    "inventory_id": {
        "type": "int", "optional": True, "computed": True,
        "description": "Inventory the job runs against. Defaults to inventory 1 when not provided.",
    },
    "extra_vars": {
        "type": "str", "optional": True,
        "description": "Extra variables, as a JSON or YAML string.",
    },
    "triggers": {
        "type": "map[str]", "optional": True,
        "description": "Arbitrary keys and values; changing them launches a new job.",
    },
    "wait_for_completion": {
        "type": "bool", "optional": True, "computed": True, "default": False,
        "description": "Wait for the job to reach a final status before the operation completes.",
    },
    "wait_for_completion_timeout_seconds": {
        "type": "int", "optional": True, "computed": True, "default": WAIT_TIMEOUT_DEFAULT,
        "description": "Seconds to wait for a final status before failing.",
    },
    "destroy_job_template_id": {
        "type": "int", "optional": True,
        "description": "Job template to launch when the resource is destroyed, for cleanup tasks.",
    },
    "job_type": {"type": "str", "computed": True, "description": "Job type."},
    "url": {"type": "str", "computed": True, "description": "URL of the job."},
    "status": {"type": "str", "computed": True, "description": "Status of the job."},
    "ignored_fields": {
        "type": "list[str]", "computed": True,
        "description": "Properties set by the user but ignored by the platform.",
    },
}


@dataclass
class ResourceResponse:
    """
    Outcome of a lifecycle operation.

    Attributes:
        state: Record to store, or None when nothing should be stored
        diagnostics: Errors and warnings for the user
        remove_state: Drop the stored record
        cleanup_job: Job launched by delete, if any
    """
    state: Optional[JobRecord] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    remove_state: bool = False
    cleanup_job: Optional[JobRecord] = None


def _new_correlation_id() -> str:
    return str(uuid.uuid4())[:8]


class JobResource:
    """Lifecycle operations for a job launched from a job template."""

    def __init__(
        self,
        client: Optional[AutomationClient] = None,
        poller: Optional[CompletionPoller] = None,
    ):
        self.client: Optional[AutomationClient] = None
        self._launcher: Optional[JobLauncher] = None
        self._poller: Optional[CompletionPoller] = poller
        if client is not None:
            self._bind(client)

    @classmethod
    def from_settings(cls, settings=None) -> "JobResource":
        if settings is None:
            from config.settings import get_settings
            settings = get_settings()
        client = AutomationClient.from_settings(settings)
        return cls(client, CompletionPoller.from_settings(client, settings))

    @staticmethod
    def type_name(provider_type_name: str) -> str:
        return provider_type_name + TYPE_NAME_SUFFIX

    @staticmethod
    def schema() -> Dict[str, Dict[str, Any]]:
        return {name: dict(attr) for name, attr in SCHEMA.items()}

    def configure(self, provider_data: Any) -> Diagnostics:
        """
        Attach the provider's API client.

        None means the provider is not configured yet and is ignored.
        """
        diagnostics = Diagnostics()
        if provider_data is None:
            return diagnostics
        if not isinstance(provider_data, AutomationClient):
            diagnostics.add_error(
                "Unexpected Resource Configure Type",
                f"Expected AutomationClient, got: {type(provider_data).__name__}.",
            )
            return diagnostics
        self._bind(provider_data)
        return diagnostics

    def _bind(self, client: AutomationClient) -> None:
        self.client = client
        self._launcher = JobLauncher(client)
        if self._poller is None or self._poller.client is not client:
            self._poller = CompletionPoller(client)

    def _require_client(self) -> AutomationClient:
        if self.client is None:
            raise RuntimeError("Job resource used before an API client was configured")
        return self.client

    # =========================================================================
    # Lifecycle operations
    # =========================================================================

    def create(
        self,
        plan: JobRecord,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResourceResponse:
        """Launch a job and, if requested, wait for it to finish."""
        self._require_client()
        diagnostics = Diagnostics()
        record = self._run_job(
            plan,
            plan.template_id,
            diagnostics,
            wait_summary="Error waiting for job to complete",
            cancel_event=cancel_event,
        )
        return ResourceResponse(state=record, diagnostics=diagnostics)

    def update(
        self,
        plan: JobRecord,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResourceResponse:
        """Launch a new job for the changed configuration."""
        return self.create(plan, cancel_event=cancel_event)

    def read(self, state: JobRecord) -> ResourceResponse:
        """
        Refresh the stored record from the platform.

        A job that no longer exists yields a warning and a request to drop
        the record so that the next apply launches a new job.
        """
        client = self._require_client()
        diagnostics = Diagnostics()
        correlation_id = _new_correlation_id()

        if not state.url:
            diagnostics.add_error("Error reading job", "The stored job has no URL.")
            return ResourceResponse(diagnostics=diagnostics)

        try:
            body, status = client.fetch_with_status(state.url, correlation_id=correlation_id)
        except TransportError as e:
            diagnostics.add_exception("Error reading job", e)
            return ResourceResponse(diagnostics=diagnostics)

        if status == HTTPStatus.NOT_FOUND:
            logger.warning(f"[{correlation_id}] Job {state.url} not found, dropping it from state")
            diagnostics.add_warning(
                "Job not found",
                "The job was not found. It may have been deleted. The job will be recreated.",
            )
            return ResourceResponse(diagnostics=diagnostics, remove_state=True)

        if status != HTTPStatus.OK:
            diagnostics.add_exception(
                "Error reading job", UnexpectedStatus(status, body, [HTTPStatus.OK]),
            )
            return ResourceResponse(diagnostics=diagnostics)

        try:
            payload = parse_job_payload(body)
        except ParseError as e:
            diagnostics.add_exception("Error parsing job response", e)
            return ResourceResponse(diagnostics=diagnostics)

        return ResourceResponse(state=state.refreshed(payload), diagnostics=diagnostics)

    def delete(
        self,
        state: JobRecord,
        cancel_event: Optional[threading.Event] = None,
    ) -> ResourceResponse:
        """
        Remove the resource, launching the cleanup job template if one is set.

        The record is dropped whatever the cleanup job's outcome.
        """
        diagnostics = Diagnostics()
        destroy_template_id = state.destroy_job_template_id

        if destroy_template_id is None or destroy_template_id <= 0:
            return ResourceResponse(diagnostics=diagnostics, remove_state=True)

        self._require_client()
        cleanup_plan = JobRecord(
            template_id=destroy_template_id,
            inventory_id=state.inventory_id,
            extra_vars=state.extra_vars,
            wait_for_completion=state.wait_for_completion,
            wait_for_completion_timeout_seconds=state.wait_for_completion_timeout_seconds,
        )
        cleanup = self._run_job(
            cleanup_plan,
            destroy_template_id,
            diagnostics,
            wait_summary="Error waiting for destroy job to complete",
            cancel_event=cancel_event,
        )
        return ResourceResponse(
            diagnostics=diagnostics,
            remove_state=True,
            cleanup_job=cleanup,
        )

    # =========================================================================
    # Launch + wait
    # =========================================================================

    def _run_job(
        self,
        plan: JobRecord,
        template_id: int,
        diagnostics: Diagnostics,
        wait_summary: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Optional[JobRecord]:
        """Launch ``template_id`` with the plan's settings; None on failure."""
        correlation_id = _new_correlation_id()

        try:
            launched = self._launcher.launch(
                template_id,
                inventory_id=plan.inventory_id,
                extra_vars=plan.extra_vars,
                correlation_id=correlation_id,
            )
        except LaunchError as e:
            diagnostics.add_exception("Error launching job", e)
            return None

        record = launched.model_copy(
            update={name: getattr(plan, name) for name in _CONFIG_FIELDS}
        )
        if not record.wait_for_completion:
            return record

        try:
            return self._poller.wait(
                record,
                record.wait_for_completion_timeout_seconds,
                cancel_event=cancel_event,
                correlation_id=correlation_id,
            )
        except (WaitError, ParseError) as e:
            diagnostics.add_exception(wait_summary, e)
            return None
