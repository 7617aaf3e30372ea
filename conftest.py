"""Root conftest.py for pytest.

Puts the project root on sys.path so the `automation` and `config`
packages import without an editable install.
"""
import os
import sys

project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Settings validation is relaxed for tests (no AAP_HOST required)
os.environ.setdefault("TESTING", "true")


def pytest_configure(config):
    """Configure pytest path early in the process."""
    if project_root not in sys.path:
        sys.path.insert(0, project_root)
