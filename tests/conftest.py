"""Shared pytest fixtures for automation job tests."""
import json
import os

import pytest
import responses

os.environ.setdefault("TESTING", "true")

from automation.client import AutomationClient
from automation.poller import CompletionPoller
from automation.resource import JobResource

HOST = "https://aap.example.com"
API = f"{HOST}/api/v2"


def job_body(url="/api/v2/jobs/42/", status="pending", job_template=7,
             inventory=1, job_type="run", ignored_fields=None, **extra) -> dict:
    """Job body as returned by the launch and job detail endpoints."""
    body = {
        "url": url,
        "status": status,
        "job_type": job_type,
        "job_template": job_template,
        "inventory": inventory,
        "extra_vars": "{}",
        "ignored_fields": ignored_fields or {},
    }
    body.update(extra)
    return body


def request_json(call) -> dict:
    """Decode the JSON body of a recorded responses call."""
    return json.loads(call.request.body)


@pytest.fixture
def make_job():
    """Factory for job response bodies."""
    return job_body


@pytest.fixture
def sent_json():
    """Decoder for request bodies captured by responses."""
    return request_json


@pytest.fixture(autouse=True)
def _reset_settings():
    """Reset the settings singleton between tests for isolation."""
    from config.settings import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_responses():
    """Enable responses mock for HTTP requests."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client():
    """API client pointed at a fake platform."""
    return AutomationClient(host=HOST, username="admin", password="secret", timeout=5)


@pytest.fixture
def poller(client):
    """Poller with short backoff so tests run fast."""
    return CompletionPoller(client, interval=0.01, max_interval=0.05)


@pytest.fixture
def resource(client, poller):
    return JobResource(client, poller)
