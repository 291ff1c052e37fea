import json
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.options import RequestOptions
from interview_session.api import InterviewApi


class FakeResponse:
    def __init__(self, status_code, body=""):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)


class ScriptedClient:
    """Replays ``steps`` in order; the last step repeats once the script runs out.

    A step is a response, an exception to raise, or an async callable whose
    result is returned.
    """

    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls = []

    async def request(self, method, url, *, content=None, headers=None):
        self.calls.append(
            {
                "method": method,
                "url": url,
                "json": json.loads(content) if content else None,
                "headers": dict(headers or {}),
            }
        )
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return await step()
        return step


class RoutedClient:
    """Dispatches on the URL path to per-endpoint ``ScriptedClient`` scripts."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    async def request(self, method, url, *, content=None, headers=None):
        path = "/" + url.split("://", 1)[-1].split("/", 1)[-1]
        self.calls.append(path)
        return await self.routes[path].request(method, url, content=content, headers=headers)


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def scripted_client():
    return ScriptedClient


@pytest.fixture
def routed_client():
    return RoutedClient


@pytest.fixture
def fast_options():
    return RequestOptions(retries=3, retry_delay_ms=1000, timeout_ms=200)


@pytest.fixture
def make_api(sleep_recorder, fast_options):
    def _make(client):
        return InterviewApi("http://backend.test", client=client, options=fast_options, sleep=sleep_recorder)

    return _make


@pytest.fixture
def sample_questions():
    return [
        {
            "id": f"q{index}",
            "question": f"Tell me about challenge {index}.",
            "type": "behavioral",
            "difficulty": "medium",
            "category": "Leadership",
        }
        for index in range(1, 6)
    ]
