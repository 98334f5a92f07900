"""
History controller — list and delete past transcriptions.

The list is always shown newest first regardless of server order, and is
cleared (never left stale) when a fetch fails. Rows without an id are skipped.
Deletion is two-phase: a pending target is named in a confirmation prompt
before any request is sent.
"""

import logging
from operator import attrgetter

from pydantic import ValidationError

from src.core.exceptions import (
    AuthRequiredError,
    ErrorKind,
    ForbiddenError,
    InvalidPayloadError,
    NotFoundError,
    QuickNoteError,
    UnknownError,
)
from src.core.models import HistoryRecord
from src.services.api_client import APIClient, extract_detail, parse_json

logger = logging.getLogger(__name__)


def sort_newest_first(records: list[HistoryRecord]) -> list[HistoryRecord]:
    """Order records by ``created_at`` descending; undated records go last."""
    dated = [r for r in records if r.created_at is not None]
    undated = [r for r in records if r.created_at is None]
    dated.sort(key=attrgetter("created_at"), reverse=True)
    return dated + undated


class HistoryController:
    """Holds the current user's history list and the pending deletion."""

    def __init__(self, client: APIClient) -> None:
        self._client = client
        self.records: list[HistoryRecord] = []
        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self.pending_delete: HistoryRecord | None = None
        self.is_loading = False
        self._deleting: set[int | str] = set()
        self._disposed = False
        self._stale = True

    def dispose(self) -> None:
        self._disposed = True

    @property
    def needs_load(self) -> bool:
        """True until a load succeeds, and again after ``mark_stale()``."""
        return self._stale and not self.is_loading

    def mark_stale(self) -> None:
        """Request a fresh fetch, e.g. when the page is entered or a job was submitted."""
        self._stale = True

    def _fail(self, exc: QuickNoteError) -> None:
        self.error = exc.detail
        self.error_kind = exc.kind

    def find(self, record_id: int | str) -> HistoryRecord | None:
        return next((r for r in self.records if r.id == record_id), None)

    # -- list --

    async def load(self) -> list[HistoryRecord]:
        """Fetch the history list, newest first.

        On any failure the list is cleared and ``error`` is set.
        """
        self.is_loading = True
        self.error = None
        self.error_kind = None
        try:
            records = await self._fetch()
        except QuickNoteError as exc:
            if self._disposed:
                return []
            logger.warning("Error fetching history (%s): %s", exc.kind, exc.detail)
            self.records = []
            self._fail(exc)
            return []
        finally:
            self.is_loading = False

        if self._disposed:
            return records
        self.records = records
        self._stale = False
        logger.debug("Loaded %d history record(s)", len(records))
        return records

    async def _fetch(self) -> list[HistoryRecord]:
        resp = await self._client.list_history()
        if resp.status_code == 401:
            raise AuthRequiredError()
        if not resp.is_success:
            raise UnknownError(
                extract_detail(resp) or f"Failed to fetch history (Status: {resp.status_code})",
                status_code=resp.status_code,
            )

        body = parse_json(resp)
        if not isinstance(body, list):
            raise InvalidPayloadError("Invalid history data received from server.")

        records = []
        for index, item in enumerate(body):
            try:
                records.append(HistoryRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping history row %d: %s", index, exc.errors()[0]["msg"])
        return sort_newest_first(records)

    # -- delete --

    def request_delete(self, record_id: int | str) -> str | None:
        """Mark a record for deletion and return the confirmation prompt.

        Returns ``None`` when the record is not in the list.
        """
        record = self.find(record_id)
        if record is None:
            return None
        self.pending_delete = record
        name = record.filename or "this item"
        return (
            f'Are you sure you want to delete the transcription for "{name}"? '
            "This action cannot be undone."
        )

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def is_deleting(self, record_id: int | str) -> bool:
        return record_id in self._deleting

    async def confirm_delete(self) -> bool:
        """Delete the record named by the last ``request_delete()``.

        Returns ``True`` when the backend confirmed the deletion; only then is
        the record removed from ``records``.
        """
        record = self.pending_delete
        if record is None:
            logger.debug("confirm_delete called without a pending record")
            return False
        if record.id in self._deleting:
            return False

        self.pending_delete = None
        self.error = None
        self.error_kind = None
        self._deleting.add(record.id)
        try:
            await self._delete(record.id)
        except QuickNoteError as exc:
            logger.warning("Error deleting transcription %s: %s", record.id, exc.detail)
            if not self._disposed:
                self.error = f"Delete failed: {exc.detail}"
                self.error_kind = exc.kind
            return False
        finally:
            self._deleting.discard(record.id)

        logger.info("Deleted transcription %s", record.id)
        if not self._disposed:
            self.records = [r for r in self.records if r.id != record.id]
        return True

    async def _delete(self, record_id: int | str) -> None:
        resp = await self._client.delete_transcription(record_id)
        if resp.is_success:
            return
        if resp.status_code == 401:
            raise AuthRequiredError("Authentication error.")
        if resp.status_code == 403:
            raise ForbiddenError("You don't have permission to delete this.")
        if resp.status_code == 404:
            raise NotFoundError("Transcription not found.")
        raise UnknownError(
            extract_detail(resp) or f"Failed to delete (Status: {resp.status_code})",
            status_code=resp.status_code,
        )
