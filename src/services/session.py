"""
Session store — the single owner of the signed-in identity.

One instance exists per application (per browser session in the Streamlit
UI). It starts in ``LoadingState.checking``; the first ``refresh_session()``
resolves it. Identity changes only through the methods defined here, all of
which go through ``AuthGateway``; every other component reads it.
"""

import asyncio
import logging

from src.core.exceptions import AuthRequiredError, QuickNoteError
from src.core.models import Credentials, LoadingState, UserIdentity
from src.services.auth import AuthGateway

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds ``identity`` and the loading flag, and drives auth events."""

    def __init__(self, gateway: AuthGateway) -> None:
        self._gateway = gateway
        self._identity: UserIdentity | None = None
        self._loading_state = LoadingState.checking
        self._pending: asyncio.Task | None = None
        # Bumped on sign-in/out so that older session checks cannot overwrite identity
        self._generation = 0

    # -- read side --

    @property
    def identity(self) -> UserIdentity | None:
        return self._identity

    @property
    def loading_state(self) -> LoadingState:
        return self._loading_state

    @property
    def is_loading(self) -> bool:
        return self._loading_state is LoadingState.checking

    @property
    def is_authenticated(self) -> bool:
        return not self.is_loading and self._identity is not None

    # -- write side --

    async def refresh_session(self) -> UserIdentity | None:
        """Probe the backend session and update ``identity``.

        Concurrent callers share the probe already in flight. Any failure,
        network errors included, leaves the store signed out; the store is
        resolved afterwards in every case.
        """
        pending = self._pending
        if pending is not None and not pending.done():
            return await asyncio.shield(pending)

        self._pending = asyncio.ensure_future(self._probe(self._generation))
        return await asyncio.shield(self._pending)

    async def _probe(self, generation: int) -> UserIdentity | None:
        identity = None
        try:
            identity = await self._gateway.probe_session()
        except AuthRequiredError:
            logger.debug("No active session")
        except QuickNoteError as exc:
            logger.warning("Session check failed (%s): %s", exc.kind, exc.detail)
        finally:
            self._loading_state = LoadingState.resolved

        if generation != self._generation:
            logger.debug("Discarding session check started before the last sign-in/out")
            return self._identity
        if identity is not None:
            logger.debug("Session resolved for %s", identity.email or identity.id)
        self._identity = identity
        return identity

    def _invalidate_pending(self) -> None:
        self._generation += 1
        self._pending = None

    async def sign_in(self, credentials: Credentials) -> UserIdentity | None:
        """Log in, then re-probe the session for the authoritative identity.

        A session check still in flight from before the login is discarded.

        Raises:
            QuickNoteError: Whatever ``AuthGateway.login`` raised; the store
                is left unchanged in that case.
        """
        await self._gateway.login(credentials)
        logger.info("Login accepted, refreshing session")
        self._invalidate_pending()
        return await self.refresh_session()

    async def sign_out(self) -> None:
        """Clear identity immediately, then tell the backend best-effort.

        A session check still in flight cannot restore the identity afterwards.
        """
        self._invalidate_pending()
        self._identity = None
        self._loading_state = LoadingState.resolved
        await self._gateway.logout()
