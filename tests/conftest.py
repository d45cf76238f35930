"""Pytest configuration and fixtures for test isolation."""

import pytest
import structlog

from awssume.arn import ARN
from awssume.filesystem import MemoryFilesystem
from awssume.models import Role


@pytest.fixture(scope="function", autouse=True)
def isolate_environment(monkeypatch):
    """Automatically isolate each test from the host environment.

    Clears awssume and AWS variables that could leak from the developer's
    environment (a real ~/.aws profile, a custom config path) into tests.
    """
    env_vars_to_clear = [
        "AWSSUME_CONFIG",
        "AWSSUME_LOG_LEVEL",
        "AWSSUME_LOG_FORMAT",
        "BUILD_VERSION",
        "AWS_PROFILE",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_SECURITY_TOKEN",
    ]

    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)

    yield

    # The CLI configures structlog globally; undo it between tests
    structlog.reset_defaults()


@pytest.fixture
def skunk_arn_string():
    """Sample IAM role ARN for testing."""
    return "arn:aws:iam::000000000000:role/skunk"


@pytest.fixture
def skunk_role(skunk_arn_string):
    return Role(alias="skunk", arn=ARN.parse(skunk_arn_string), session_name="sess")


@pytest.fixture
def memory_fs():
    return MemoryFilesystem()
