"""
Auth gateway: login, registration, logout and session probe.

Pure request/response on top of ``APIClient``; it keeps no state of its own.
Session state lives in ``SessionStore``, which is the only caller that turns
these results into identity changes.
"""

import logging

from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import get_settings
from src.core.exceptions import (
    AlreadyExistsError,
    AuthRequiredError,
    FieldValidationError,
    InputValidationError,
    InvalidCredentialsError,
    InvalidPayloadError,
    QuickNoteError,
    ServerBusyError,
    UnknownError,
    UnreachableError,
)
from src.core.models import Credentials, UserIdentity
from src.services.api_client import APIClient, extract_detail, parse_json

logger = logging.getLogger(__name__)

_ALREADY_EXISTS_CODE = "REGISTER_USER_ALREADY_EXISTS"
_INVALID_PASSWORD_CODE = "REGISTER_INVALID_PASSWORD"


def _field_errors(detail: list) -> dict[str, str]:
    """Map a FastAPI validation list to ``{field: message}``."""
    errors: dict[str, str] = {}
    for item in detail:
        if not isinstance(item, dict) or not item.get("msg"):
            continue
        loc = [str(part) for part in item.get("loc", []) if part not in ("body", "query")]
        field = loc[-1] if loc else "__all__"
        errors.setdefault(field, str(item["msg"]))
    return errors


class AuthGateway:
    """Stateless wrapper around the ``/api/auth`` endpoints."""

    def __init__(self, client: APIClient, logout_attempts: int | None = None) -> None:
        self._client = client
        if logout_attempts is None:
            logout_attempts = get_settings().logout_retry_attempts
        self._logout_attempts = logout_attempts

    async def probe_session(self) -> UserIdentity:
        """Return the identity behind the current session cookie.

        Raises:
            AuthRequiredError: No valid session (401).
            InvalidPayloadError: 2xx without a usable identity object.
            UnknownError: Any other status.
        """
        resp = await self._client.get_session()
        if resp.status_code == 401:
            raise AuthRequiredError("Not signed in.")
        if not resp.is_success:
            logger.warning("Session probe failed with status %s", resp.status_code)
            raise UnknownError(
                extract_detail(resp) or f"Session check failed (Status: {resp.status_code})",
                status_code=resp.status_code,
            )

        body = parse_json(resp)
        if not isinstance(body, dict):
            raise InvalidPayloadError("Session response did not contain a user.")
        try:
            return UserIdentity.model_validate(body)
        except ValidationError as exc:
            raise InvalidPayloadError(
                f"Invalid session payload: {exc.error_count()} error(s)"
            ) from exc

    async def login(self, credentials: Credentials) -> UserIdentity | None:
        """Submit credentials and return the identity when the body carries one.

        The login response is not guaranteed to describe the user, so callers
        must refresh the session afterwards.

        Raises:
            InputValidationError: Email or password left empty (no request sent).
            InvalidCredentialsError: Backend rejected the input (400/422).
            UnknownError: Any other non-success status.
        """
        password = credentials.password.get_secret_value()
        if not credentials.username.strip() or not password:
            raise InputValidationError("Please enter both email and password.")

        resp = await self._client.login(credentials.username.strip(), password)
        if resp.status_code in (400, 422):
            detail = extract_detail(resp)
            logger.info("Login rejected (%s): %s", resp.status_code, detail)
            raise InvalidCredentialsError(
                detail or "Login failed. Please check your credentials.",
                status_code=resp.status_code,
            )
        if not resp.is_success:
            logger.warning("Login failed with status %s", resp.status_code)
            raise UnknownError(
                "Login failed. Please check your credentials.", status_code=resp.status_code
            )

        body = parse_json(resp)
        if isinstance(body, dict) and ("id" in body or "email" in body):
            return UserIdentity.model_validate(body)
        return None

    async def register(
        self,
        email: str,
        password: str,
        confirm_password: str | None = None,
    ) -> None:
        """Create an account. Never retried.

        Raises:
            InputValidationError: Missing fields or mismatching passwords.
            AlreadyExistsError: The email is already registered.
            FieldValidationError: Malformed input, reported per field.
            UnknownError: Anything else.
        """
        if not email or not password or (confirm_password is not None and not confirm_password):
            raise InputValidationError("Please fill in all fields.")
        if confirm_password is not None and password != confirm_password:
            raise InputValidationError("Passwords do not match.")

        resp = await self._client.register(email, password)
        if resp.is_success:
            logger.info("Registered new account")
            return

        body = parse_json(resp)
        detail = body.get("detail") if isinstance(body, dict) else None

        if resp.status_code == 400:
            if isinstance(detail, str) and _ALREADY_EXISTS_CODE in detail:
                raise AlreadyExistsError()
            if isinstance(detail, dict) and detail.get("code") == _INVALID_PASSWORD_CODE:
                reason = str(detail.get("reason") or "Password is invalid.")
                raise FieldValidationError(
                    reason, field_errors={"password": reason}, status_code=400
                )
            raise UnknownError(
                extract_detail(resp) or "Registration failed. Please try again.",
                status_code=400,
            )

        if resp.status_code == 422:
            field_errors = _field_errors(detail) if isinstance(detail, list) else {}
            headline = next(iter(field_errors.values()), None)
            raise FieldValidationError(
                headline or "Invalid input provided.", field_errors=field_errors
            )

        logger.warning("Registration failed with status %s", resp.status_code)
        raise UnknownError("Registration failed. Please try again.", status_code=resp.status_code)

    async def logout(self) -> None:
        """Best-effort backend logout; failures are logged, never raised.

        The local cookie jar is dropped afterwards whatever the outcome.
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._logout_attempts),
                wait=wait_exponential(multiplier=0.2, max=2),
                retry=retry_if_exception_type((UnreachableError, ServerBusyError)),
            ):
                with attempt:
                    resp = await self._client.logout()
        except RetryError as exc:
            logger.warning("Backend logout unreachable: %s", exc.last_attempt.exception())
            return
        except QuickNoteError as exc:
            logger.warning("Backend logout failed: %s", exc.detail)
            return
        finally:
            self._client.clear_cookies()

        if not resp.is_success:
            logger.warning("Backend logout call failed with status %s", resp.status_code)
        else:
            logger.info("Backend logout call successful")
