"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.bridge.models import RawResponse  # noqa: E402
from core.config_manager import BridgeConfig  # noqa: E402

TEST_URL = "https://bridge.test/api/gemini"


class FakeTransport:
    """Returns a canned response and records what was posted"""

    def __init__(self, status=200, body=b'{"text": "hello"}', error=None):
        self.status = status
        self.body = body
        self.error = error
        self.sent = []

    async def post(self, body):
        self.sent.append(body)
        if self.error is not None:
            raise self.error
        return RawResponse(status=self.status, body=self.body)


class MemorySink:
    """Diagnostics sink that keeps the latest body per file name"""

    def __init__(self):
        self.files = {}

    def write(self, name, body):
        self.files[name] = body
        return Path("/memory") / name


@pytest.fixture
def bridge_config(tmp_path):
    return BridgeConfig(endpoint_url=TEST_URL, diagnostics_dir=tmp_path / "diagnostics")
