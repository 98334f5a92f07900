"""
Asynchronous HTTP client for the QuickNote backend API.

Uses ``httpx.AsyncClient``. Unlike a typical wrapper this client does **not**
raise on non-2xx statuses: every caller maps statuses to its own error
classes, so only transport-level failures are translated here.

The backend authenticates with a session cookie, which is kept in a cookie
jar owned by the client instance and sent on every call.
"""

import logging
from typing import Any

import httpx

from src.core.config import get_settings
from src.core.exceptions import ServerBusyError, UnreachableError
from src.core.models import AudioFile, ExportFormat

logger = logging.getLogger(__name__)


def parse_json(response: httpx.Response) -> Any:
    """Return the decoded JSON body, or ``None`` when it is empty or not JSON."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def detail_from_body(body: Any) -> str | None:
    """Pull a human-readable message out of a decoded error body.

    Handles the shapes the backend produces: ``{"detail": "..."}``,
    FastAPI validation lists ``{"detail": [{"msg": ...}]}``,
    ``{"detail": {"code": ..., "reason": ...}}`` and ``{"message": "..."}``.
    """
    if not isinstance(body, dict):
        return None

    detail = body.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        first = detail[0]
        if isinstance(first, dict) and first.get("msg"):
            return str(first["msg"])
    if isinstance(detail, dict):
        reason = detail.get("reason") or detail.get("code")
        if reason:
            return str(reason)

    message = body.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def extract_detail(response: httpx.Response) -> str | None:
    return detail_from_body(parse_json(response))


class APIClient:
    """Thin asynchronous wrapper around httpx for calling the backend.

    A fresh ``httpx.AsyncClient`` is opened per request so that the client can
    be driven from successive event loops (Streamlit reruns call
    ``asyncio.run`` each time); the cookie jar survives between requests.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the HTTP client.

        Args:
            base_url: Backend origin; ``/api/...`` paths are appended to it.
            timeout: Default request timeout in seconds.
            transport: Optional httpx transport (tests pass ``httpx.MockTransport``).
        """
        settings = get_settings()
        self._base_url = (base_url or settings.api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._transcribe_timeout = settings.transcribe_timeout
        self._transport = transport
        self._cookies = httpx.Cookies()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def cookies(self) -> httpx.Cookies:
        return self._cookies

    def clear_cookies(self) -> None:
        self._cookies = httpx.Cookies()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Execute an HTTP request, translating transport failures.

        Args:
            method: HTTP method name ("GET", "POST", "DELETE").
            path: API endpoint path (e.g. "/api/history").
            **kwargs: Passed through to httpx (json, data, files, timeout, ...).

        Returns:
            The httpx Response, whatever its status code.

        Raises:
            ServerBusyError: The request timed out.
            UnreachableError: No usable response was received.
        """
        headers = {"Accept": "application/json"}
        headers.update(kwargs.pop("headers", {}))
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                cookies=self._cookies,
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, headers=headers, **kwargs)
                self._cookies = httpx.Cookies(client.cookies)
        except httpx.TimeoutException:
            logger.warning("%s %s timed out", method, path)
            raise ServerBusyError("The server took too long to respond.") from None
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise UnreachableError(f"Could not connect to the server: {exc}") from None
        except httpx.HTTPError as exc:
            logger.error("%s %s failed reading the response: %s", method, path, exc)
            raise UnreachableError(f"Invalid response from the server: {exc}") from None

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        return resp

    # -- auth --

    async def get_session(self) -> httpx.Response:
        return await self._request("GET", "/api/auth/session")

    async def login(self, username: str, password: str) -> httpx.Response:
        # fastapi-users expects an OAuth2 password form, not JSON
        return await self._request(
            "POST",
            "/api/auth/login",
            data={"username": username, "password": password},
        )

    async def register(self, email: str, password: str) -> httpx.Response:
        return await self._request(
            "POST",
            "/api/auth/register",
            json={"email": email, "password": password},
        )

    async def logout(self) -> httpx.Response:
        return await self._request("POST", "/api/auth/logout")

    # -- transcription --

    async def transcribe(self, audio: AudioFile) -> httpx.Response:
        content_type = audio.content_type or "application/octet-stream"
        return await self._request(
            "POST",
            "/api/transcribe",
            files={"audio_file": (audio.filename, audio.content, content_type)},
            timeout=self._transcribe_timeout,
        )

    # -- history --

    async def list_history(self) -> httpx.Response:
        return await self._request("GET", "/api/history")

    async def get_transcription(self, transcription_id: int | str) -> httpx.Response:
        return await self._request("GET", f"/api/transcription/{transcription_id}")

    async def delete_transcription(self, transcription_id: int | str) -> httpx.Response:
        return await self._request("DELETE", f"/api/transcription/{transcription_id}")

    # -- export --

    async def export_transcription(
        self, transcription_id: int | str, fmt: ExportFormat
    ) -> httpx.Response:
        return await self._request(
            "GET",
            f"/api/transcription/{transcription_id}/export/{fmt.value}",
            headers={"Accept": f"{fmt.media_type}, application/json"},
        )
