"""
Launch jobs from job templates.

Every call creates a new job on the platform; there is no lookup or reuse
of jobs launched earlier.

Usage:
    from automation.launcher import JobLauncher

    launcher = JobLauncher(client)
    record = launcher.launch(template_id=7, inventory_id=3, extra_vars='{"target": "web"}')
    print(record.url, record.status)
"""

import logging
from http import HTTPStatus
from typing import Any, Dict, Optional

from automation.client import AutomationClient, validate_response
from automation.errors import LaunchError, ParseError, TransportError, UnexpectedStatus
from automation.extra_vars import ExtraVarsError, validate_extra_vars
from automation.job import DEFAULT_INVENTORY_ID, JobRecord, parse_job_payload

logger = logging.getLogger(__name__)


def resolve_inventory_id(inventory_id: Optional[int]) -> int:
    """Inventory to launch into; unset or 0 means the default inventory."""
    return inventory_id or DEFAULT_INVENTORY_ID


def build_launch_body(inventory_id: Optional[int], extra_vars: Optional[str]) -> Dict[str, Any]:
    """Request payload for the launch endpoint. Empty extra_vars are omitted."""
    body: Dict[str, Any] = {"inventory": resolve_inventory_id(inventory_id)}
    if extra_vars:
        body["extra_vars"] = extra_vars
    return body


class JobLauncher:
    """Submits launch requests and turns the responses into job records."""

    def __init__(self, client: AutomationClient):
        self.client = client

    def launch_url(self, template_id: int) -> str:
        return f"{self.client.api_endpoint}/job_templates/{template_id}/launch"

    def launch(
        self,
        template_id: int,
        inventory_id: Optional[int] = None,
        extra_vars: Optional[str] = None,
        correlation_id: str = "",
    ) -> JobRecord:
        """
        Launch a new job from a job template.

        Args:
            template_id: Job template to launch (must be positive)
            inventory_id: Inventory override; None or 0 uses inventory 1
            extra_vars: JSON or YAML text, sent unparsed
            correlation_id: For log tracing

        Returns:
            JobRecord for the new job, carrying its URL and initial status

        Raises:
            LaunchError: Invalid template id, transport failure, any status
                other than 201, or a malformed response body
        """
        log_prefix = f"[{correlation_id}] " if correlation_id else ""

        if not isinstance(template_id, int) or isinstance(template_id, bool) or template_id <= 0:
            raise LaunchError(f"Job template id must be a positive integer, got {template_id!r}")
        try:
            validate_extra_vars(extra_vars)
        except ExtraVarsError as e:
            raise LaunchError(f"{log_prefix}{e}") from e

        body = build_launch_body(inventory_id, extra_vars)
        url = self.launch_url(template_id)
        logger.info(
            f"{log_prefix}Launching job template {template_id} "
            f"(inventory={body['inventory']})"
        )

        response_body = b""
        try:
            response, response_body = self.client.request(
                "POST", url, body=body, correlation_id=correlation_id,
            )
            validate_response(response, response_body, [HTTPStatus.CREATED])
            payload = parse_job_payload(response_body)
            if not payload.url:
                raise ParseError("Launch response did not include a job URL", response_body)
        except TransportError as e:
            raise LaunchError(f"{log_prefix}Error launching job template {template_id}: {e}") from e
        except (UnexpectedStatus, ParseError) as e:
            raise LaunchError(
                f"{log_prefix}Error launching job template {template_id}: {e}",
                body=response_body,
            ) from e

        record = JobRecord(
            template_id=template_id,
            inventory_id=body["inventory"],
            extra_vars=extra_vars,
        ).refreshed(payload)

        logger.info(
            f"{log_prefix}Launched job {record.url} from template {template_id}, status: {record.status}",
            extra={"correlation_id": correlation_id, "job_url": record.url,
                   "template_id": template_id, "status": record.status},
        )
        return record
