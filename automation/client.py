"""
Automation platform REST API client.

Thin wrapper around a requests.Session that knows the platform's API
endpoint, attaches static credentials and maps transport failures and
unexpected status codes onto the automation error hierarchy.

Usage:
    from automation.client import AutomationClient

    client = AutomationClient.from_settings()  # Uses AAP_* env vars
    response, body = client.request("POST", f"{client.api_endpoint}/job_templates/7/launch",
                                    body={"inventory": 1})
    body = client.fetch("/api/v2/jobs/42/")

Environment Variables:
    AAP_HOST: Platform base URL (e.g. https://aap.example.com)
    AAP_USERNAME / AAP_PASSWORD: Basic auth credentials
    AAP_TOKEN: Bearer token (takes precedence over basic auth)
    AAP_API_PATH: API root path (default: /api/v2)
    AAP_INSECURE_SKIP_VERIFY: Disable TLS verification (default: false)
    AAP_REQUEST_TIMEOUT: Per-request timeout in seconds (default: 30)

The client holds no per-job state, so one instance may be shared by
independent launch/poll sequences running in different threads.
"""

import json
import logging
from http import HTTPStatus
from typing import Any, Iterable, Optional, Tuple
from urllib.parse import urljoin

import requests
from requests.exceptions import ConnectionError, Timeout, RequestException

from automation.errors import NotFound, TransportError, UnexpectedStatus

logger = logging.getLogger(__name__)


def validate_response(
    response: requests.Response,
    body: bytes,
    expected: Iterable[int],
) -> None:
    """
    Check a response status against the statuses an operation accepts.

    Raises:
        NotFound: Status is 404 and 404 is not expected
        UnexpectedStatus: Any other status outside ``expected``
    """
    expected = tuple(int(status) for status in expected)
    if response.status_code in expected:
        return
    if response.status_code == HTTPStatus.NOT_FOUND:
        raise NotFound(body, expected)
    raise UnexpectedStatus(response.status_code, body, expected)


class AutomationClient:
    """
    Automation platform REST API client.

    Attributes:
        host: Platform base URL, scheme included
        api_path: API root path appended to the host
        timeout: Default per-request timeout in seconds
    """

    def __init__(
        self,
        host: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        token: Optional[str] = None,
        api_path: str = "/api/v2",
        verify_ssl: bool = True,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            host: Platform base URL (e.g. https://aap.example.com)
            username: Basic auth username
            password: Basic auth password
            token: Bearer token, used instead of basic auth when given
            api_path: API root path (default: /api/v2)
            verify_ssl: Verify TLS certificates (default: True)
            timeout: Default per-request timeout in seconds
            session: Pre-built session (tests, custom adapters)
        """
        if not host:
            raise ValueError("Automation platform host is required")

        self.host = host.rstrip("/")
        self.api_path = "/" + api_path.strip("/") if api_path.strip("/") else ""
        self.timeout = timeout
        self.session = session or requests.Session()

        self.session.verify = verify_ssl
        self.session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })

        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"
        elif username:
            self.session.auth = (username, password or "")

    @classmethod
    def from_settings(cls, settings=None) -> "AutomationClient":
        """Build a client from AAP_* settings."""
        if settings is None:
            from config.settings import get_settings
            settings = get_settings()
        api = settings.api
        return cls(
            host=api.host,
            username=api.username or None,
            password=api.password.get_secret_value() or None,
            token=api.token.get_secret_value() or None,
            api_path=api.api_path,
            verify_ssl=not api.insecure_skip_verify,
            timeout=api.request_timeout,
        )

    @property
    def api_endpoint(self) -> str:
        """Absolute URL of the API root, without a trailing slash."""
        return f"{self.host}{self.api_path}"

    def resolve(self, url: str) -> str:
        """
        Turn a job handle into an absolute URL.

        Handles reported by the platform are server-relative paths
        (e.g. "/api/v2/jobs/42/"); absolute URLs are returned unchanged.

        Examples:
            >>> client.resolve("/api/v2/jobs/42/")
            'https://aap.example.com/api/v2/jobs/42/'
        """
        return urljoin(self.host + "/", url)

    def request(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        timeout: Optional[float] = None,
        correlation_id: str = "",
    ) -> Tuple[requests.Response, bytes]:
        """
        Send a request and return the response and its raw body.

        The status code is not checked; use validate_response().

        Args:
            method: HTTP method
            url: Absolute URL or server-relative path
            body: JSON-serializable payload (dict) or pre-encoded bytes/str
            timeout: Request timeout in seconds (default: self.timeout)
            correlation_id: For log tracing

        Returns:
            Tuple of (response, body bytes)

        Raises:
            TransportError: Connection failure, timeout or other request error
        """
        url = self.resolve(url)
        timeout = timeout if timeout is not None else self.timeout
        log_prefix = f"[{correlation_id}] " if correlation_id else ""

        if isinstance(body, (dict, list)):
            data = json.dumps(body)
        else:
            data = body

        try:
            logger.debug(f"{log_prefix}{method} {url}")
            response = self.session.request(
                method=method,
                url=url,
                data=data,
                timeout=timeout,
            )
        except ConnectionError as e:
            raise TransportError(f"{log_prefix}Cannot connect to {self.host}: {e}") from e
        except Timeout as e:
            raise TransportError(f"{log_prefix}Request to {url} timed out after {timeout}s") from e
        except RequestException as e:
            raise TransportError(f"{log_prefix}Request failed: {e}") from e

        logger.debug(f"{log_prefix}{method} {url} -> {response.status_code}")
        return response, response.content

    def fetch(
        self,
        url: str,
        timeout: Optional[float] = None,
        correlation_id: str = "",
    ) -> bytes:
        """
        GET a resource, requiring a 200 response.

        Raises:
            TransportError: Request could not be completed
            NotFound: Resource does not exist (404)
            UnexpectedStatus: Any other non-200 status
        """
        response, body = self.request("GET", url, timeout=timeout, correlation_id=correlation_id)
        validate_response(response, body, [HTTPStatus.OK])
        return body

    def fetch_with_status(
        self,
        url: str,
        timeout: Optional[float] = None,
        correlation_id: str = "",
    ) -> Tuple[bytes, int]:
        """
        GET a resource and return its body together with the status code.

        Callers decide what each status means (e.g. 404 on read).

        Raises:
            TransportError: Request could not be completed
        """
        response, body = self.request("GET", url, timeout=timeout, correlation_id=correlation_id)
        return body, response.status_code

    def close(self) -> None:
        self.session.close()
