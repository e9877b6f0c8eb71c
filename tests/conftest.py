"""
Pytest Configuration and Shared Fixtures
=========================================

Common fixtures used across all test modules.

Test Environment Separation:
    - LOCAL/DEV: Mocked AWS (moto) - runs with `pytest -m "not preprod"`
    - PREPROD/PROD: Deployed functions - runs with `pytest -m "preprod"`

    Files with "preprod" in their name are auto-marked with the `preprod` marker.

For Developers:
    - SESSION_COOKIE_SECRET is set to TEST_SECRET_KEY for every test
    - The process-wide session config and secrets cache are cleared
      around every test, so tests can change SESSION_COOKIE_* freely
    - Use caplog with the helpers below to assert on expected logs
"""

import logging
import os
from pathlib import Path

import pytest

from src.lambdas.shared.models.session_config import clear_config_cache
from src.lambdas.shared.secrets import clear_cache

# 32 random bytes, base64 encoded (44 bytes of key material)
TEST_SECRET_KEY = "/pQCobVcOc+ru0WVTx24+MlCL7fIAPcPTsgGqXvV8M0="  # pragma: allowlist secret


def pytest_configure(config):
    """Register custom markers to avoid warnings."""
    config.addinivalue_line(
        "markers",
        "preprod: marks tests that require deployed functions (deselect with '-m \"not preprod\"')",
    )


def pytest_collection_modifyitems(config, items):
    """Auto-mark files with "preprod" in their name as preprod tests."""
    preprod_marker = pytest.mark.preprod

    for item in items:
        test_file = Path(item.fspath)
        if "preprod" in test_file.name.lower():
            item.add_marker(preprod_marker)


os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")


@pytest.fixture(autouse=True)
def reset_env_vars():
    """
    Reset environment variables and session caches around each test.

    Ensures tests don't pollute each other's environment.
    """
    original_env = os.environ.copy()
    os.environ["SESSION_COOKIE_SECRET"] = TEST_SECRET_KEY
    clear_config_cache()
    clear_cache()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    clear_config_cache()
    clear_cache()


@pytest.fixture
def aws_credentials():
    """
    Set up mock AWS credentials for moto.

    Use this fixture when testing AWS SDK calls.
    """
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_REGION"] = "us-east-1"

    yield


@pytest.fixture
def secret_key() -> str:
    """The signing key installed in SESSION_COOKIE_SECRET."""
    return TEST_SECRET_KEY


@pytest.fixture
def lambda_context():
    """Minimal stand-in for the Lambda context object."""

    class _Context:
        function_name = "test-session"
        aws_request_id = "test-request-id"
        client_context = None

    return _Context()


def make_event(cookie_headers: list[str] | None = None, path: str = "/session") -> dict:
    """Build a proxy integration event carrying the given Cookie headers."""
    return {
        "httpMethod": "GET",
        "path": path,
        "headers": {},
        "multiValueHeaders": {"Cookie": cookie_headers} if cookie_headers else {},
    }


# =============================================================================
# Log Validation Helpers
# =============================================================================


def assert_error_logged(caplog, pattern: str):
    """
    Helper to assert an ERROR log was captured.

    Example:
        def test_short_secret(caplog):
            ...
            assert_error_logged(caplog, "Session cookie secret too short")
    """
    assert any(
        pattern in record.message
        for record in caplog.records
        if record.levelno >= logging.ERROR
    ), f"Expected ERROR log matching '{pattern}' not found"


def assert_info_logged(caplog, pattern: str):
    """Helper to assert an INFO log was captured."""
    assert any(
        pattern in record.message
        for record in caplog.records
        if record.levelno == logging.INFO
    ), f"Expected INFO log matching '{pattern}' not found"
