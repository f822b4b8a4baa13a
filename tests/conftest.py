"""Shared fixtures for the API and push client tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_TEST_DB_DIR = tempfile.mkdtemp(prefix="secult-notify-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'test.db'}"
os.environ["SECRET_KEY"] = "test-secret-key"

from tests.helpers import FakePushServer  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def push_server() -> FakePushServer:
    return FakePushServer()
