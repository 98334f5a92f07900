"""Shared pytest fixtures for the QuickNote client test suite.

Provides a scripted fake backend mounted on ``httpx.MockTransport`` so that
the real ``APIClient`` (cookies, multipart, form encoding) is exercised
without a network.
"""

from collections.abc import Callable

import httpx
import pytest

from src.core.models import AudioFile
from src.services.api_client import APIClient

BASE_URL = "http://backend.test"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Routes ``(method, path)`` to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json=None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Register a response; a fresh ``httpx.Response`` is built per call."""

        def handler(_request: httpx.Request) -> httpx.Response:
            if json is not None:
                return httpx.Response(status, json=json, headers=headers)
            return httpx.Response(status, content=content or b"", headers=headers)

        self.routes[(method, path)] = handler

    def on(self, method: str, path: str, handler: Handler) -> None:
        """Register a custom (sync or async) handler."""
        self.routes[(method, path)] = handler

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api_client(backend) -> APIClient:
    """An APIClient whose requests are served by ``backend``."""
    return APIClient(base_url=BASE_URL, timeout=5.0, transport=httpx.MockTransport(backend))


# ---------------------------------------------------------------------------
# Payload fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def audio_file() -> AudioFile:
    return AudioFile(
        filename="meeting.mp3", content=b"ID3fake-mp3-bytes", content_type="audio/mpeg"
    )


@pytest.fixture
def transcription_payload() -> dict:
    """A successful ``POST /api/transcribe`` body using both field spellings."""
    return {
        "transcriptions": [
            {
                "speaker_id": "SPEAKER_00",
                "start_timestamp": 0.0,
                "end_timestamp": 2.5,
                "text_transcript": "Good morning everyone.",
            },
            {
                "speaker_id": 1,
                "start_time": 2.5,
                "end_time": 4.75,
                "transcript": "Morning!",
            },
        ],
        "summarized_text": "## Summary\n- Greetings were exchanged.",
    }


@pytest.fixture
def detail_payload() -> dict:
    """A ``GET /api/transcription/{id}`` body."""
    return {
        "id": 42,
        "filename": "standup.wav",
        "created_at": "2026-03-01T09:30:00",
        "status": "completed",
        "result": {
            "transcriptions": [
                {
                    "speaker_id": "SPEAKER_01",
                    "start_time": 1.0,
                    "end_time": 3.0,
                    "transcript": "Yesterday I fixed the upload bug.",
                }
            ]
        },
        "summarized_text": "Upload bug fixed.",
    }


@pytest.fixture
def corrupt_gzip():
    """Handler answering with ``Content-Encoding: gzip`` over a body that is not gzip."""

    def handler(_request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"content-encoding": "gzip", "content-type": "application/json"},
            stream=httpx.ByteStream(b'{"not": "gzipped"}'),
        )

    return handler
