"""Shared pytest fixtures for pixshop tests."""

import base64
import sys
from pathlib import Path
from typing import Optional

import httpx
import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from utils.config import EnvCredentials, OpenRouterSettings, ReplicateSettings  # noqa: E402

# 1x1 opaque PNG
PNG_1X1 = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00fake-jpeg-body"

REPLICATE_BASE = "https://api.replicate.com"
REPLICATE_SUBMIT_URL = f"{REPLICATE_BASE}/v1/models/google/nano-banana/predictions"
OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"


class FakeRemote:
    """Scripted HTTP backend for httpx.MockTransport.

    Each (method, url) route holds a queue of response specs; the last spec
    repeats once the queue is down to one entry. Every request is recorded.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], list[dict]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, *specs: dict) -> None:
        self.routes.setdefault((method, url), []).extend(specs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, str(request.url)))
        if not queue:
            return httpx.Response(404, text=f"no route for {request.method} {request.url}")
        spec = queue.pop(0) if len(queue) > 1 else queue[0]
        if "raise" in spec:
            raise spec["raise"]
        return httpx.Response(
            spec.get("status", 200),
            json=spec.get("json"),
            content=spec.get("content"),
            headers=spec.get("headers"),
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def count(self, method: Optional[str] = None, url: Optional[str] = None) -> int:
        return sum(
            1
            for r in self.requests
            if (method is None or r.method == method) and (url is None or str(r.url) == url)
        )


class RecordingSleep:
    """Injectable sleep that records intervals instead of waiting."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_1X1


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def credentials() -> EnvCredentials:
    """Both provider credentials configured."""
    return EnvCredentials(
        {"REPLICATE_API_TOKEN": "r8_test_token", "OPENROUTER_API_KEY": "sk-or-test"}
    )


@pytest.fixture
def no_credentials() -> EnvCredentials:
    return EnvCredentials({})


@pytest.fixture
def replicate_settings() -> ReplicateSettings:
    return ReplicateSettings(api_base=REPLICATE_BASE, model="google/nano-banana")


@pytest.fixture
def openrouter_settings() -> OpenRouterSettings:
    return OpenRouterSettings()
