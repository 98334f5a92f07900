"""
Result viewer — one transcription record plus its summary exports.

``load()`` validates the payload shape before anything is rendered: a record
without an id, or with a segment collection that is not a list of objects,
is reported as an error instead of being partially shown.

Exports are single-flight per format and keep their errors per format, so a
failed PDF export never blocks a DOCX retry.
"""

import logging
import re
from typing import Any
from urllib.parse import unquote

import httpx
from pydantic import ValidationError

from src.core.exceptions import (
    AuthRequiredError,
    ErrorKind,
    ForbiddenError,
    InputValidationError,
    InvalidPayloadError,
    NoSummaryError,
    NotFoundError,
    QuickNoteError,
    UnknownError,
)
from src.core.models import ExportFormat, ExportedFile, TranscriptionDetail
from src.services.api_client import APIClient, extract_detail, parse_json

logger = logging.getLogger(__name__)

_FILENAME_STAR_RE = re.compile(r"filename\*\s*=\s*(?:[\w-]+)?'[^']*'([^;]+)", re.IGNORECASE)
_FILENAME_QUOTED_RE = re.compile(r'filename\s*=\s*"([^"]+)"', re.IGNORECASE)
_FILENAME_BARE_RE = re.compile(r"filename\s*=\s*([^;\s]+)", re.IGNORECASE)


def filename_from_disposition(header: str | None) -> str | None:
    """Extract the download filename from a ``Content-Disposition`` header.

    RFC 5987 ``filename*=`` wins over ``filename=``.
    """
    if not header:
        return None
    for pattern in (_FILENAME_STAR_RE, _FILENAME_QUOTED_RE, _FILENAME_BARE_RE):
        match = pattern.search(header)
        if match:
            name = match.group(1).strip()
            if pattern is _FILENAME_STAR_RE:
                name = unquote(name)
            if name:
                return name
    return None


def fallback_export_name(record_filename: str | None, fmt: ExportFormat) -> str:
    return f"{record_filename or 'transcription'}_summary.{fmt.value}"


def parse_detail(body: Any) -> TranscriptionDetail:
    """Validate and normalize a ``GET /api/transcription/{id}`` body.

    Raises:
        InvalidPayloadError: Missing id, or malformed segment collection.
    """
    if not isinstance(body, dict) or body.get("id") in (None, ""):
        raise InvalidPayloadError("Invalid data format received from server (missing ID).")

    result = body.get("result")
    segments = result.get("transcriptions") if isinstance(result, dict) else None
    if segments is not None and (
        not isinstance(segments, list) or not all(isinstance(s, dict) for s in segments)
    ):
        logger.error("Invalid 'transcriptions' format in result for %s", body.get("id"))
        raise InvalidPayloadError("Invalid transcription segment data received.")

    try:
        return TranscriptionDetail.model_validate(body)
    except ValidationError as exc:
        logger.error("Transcription %s failed validation: %s", body.get("id"), exc)
        raise InvalidPayloadError("Invalid transcription data received from server.") from exc


class ResultViewer:
    """Loads one transcription record and exports its summary."""

    def __init__(self, client: APIClient) -> None:
        self._client = client
        self.detail: TranscriptionDetail | None = None
        self.error: str | None = None
        self.error_kind: ErrorKind | None = None
        self.is_loading = False
        self.export_errors: dict[ExportFormat, str] = {}
        self._exporting: set[ExportFormat] = set()
        self._disposed = False

    def dispose(self) -> None:
        self._disposed = True

    # -- load --

    async def load(self, transcription_id: int | str | None) -> TranscriptionDetail | None:
        """Fetch and validate a record. Errors land in ``error``/``error_kind``."""
        self.error = None
        self.error_kind = None
        self.export_errors = {}
        self.detail = None

        if transcription_id is None or str(transcription_id).strip() == "":
            self._fail(InputValidationError("No transcription ID found in the URL."))
            return None

        self.is_loading = True
        try:
            detail = await self._fetch(transcription_id)
        except QuickNoteError as exc:
            logger.warning("Error fetching transcription %s: %s", transcription_id, exc.detail)
            if not self._disposed:
                self._fail(exc)
            return None
        finally:
            self.is_loading = False

        if not self._disposed:
            self.detail = detail
        return detail

    async def _fetch(self, transcription_id: int | str) -> TranscriptionDetail:
        resp = await self._client.get_transcription(transcription_id)
        if resp.status_code == 401:
            raise AuthRequiredError("Authentication failed. Please log in.")
        if resp.status_code == 403:
            raise ForbiddenError("Access denied. You don't have permission to view this.")
        if resp.status_code == 404:
            raise NotFoundError("Transcription not found.")
        if not resp.is_success:
            raise UnknownError(
                extract_detail(resp) or f"Error fetching data (Status: {resp.status_code})",
                status_code=resp.status_code,
            )
        return parse_detail(parse_json(resp))

    def _fail(self, exc: QuickNoteError) -> None:
        self.error = exc.detail
        self.error_kind = exc.kind

    # -- export --

    @property
    def can_export(self) -> bool:
        return self.detail is not None and self.detail.has_summary

    def is_exporting(self, fmt: ExportFormat) -> bool:
        return fmt in self._exporting

    def export_enabled(self, fmt: ExportFormat) -> bool:
        return self.can_export and not self.is_exporting(fmt)

    async def export(self, fmt: ExportFormat | str) -> ExportedFile | None:
        """Download the summary rendered as ``fmt``.

        Returns ``None`` when the export was refused (no summary, same format
        already in flight) or failed; failures are kept in ``export_errors``.
        """
        fmt = ExportFormat(fmt)
        if fmt in self._exporting:
            logger.debug("%s export already in flight", fmt.value)
            return None

        self.export_errors.pop(fmt, None)
        detail = self.detail
        if detail is None or not detail.has_summary:
            logger.warning("Export attempted but no summary data available")
            self.export_errors[fmt] = NoSummaryError().detail
            return None

        self._exporting.add(fmt)
        try:
            exported = await self._download(detail, fmt)
        except QuickNoteError as exc:
            logger.error("Export failed for %s (%s): %s", detail.id, fmt.value, exc.detail)
            if not self._disposed:
                self.export_errors[fmt] = exc.detail
            return None
        finally:
            self._exporting.discard(fmt)

        logger.info("Exported %s as %s", detail.id, exported.filename)
        return exported

    async def _download(self, detail: TranscriptionDetail, fmt: ExportFormat) -> ExportedFile:
        label = fmt.value.upper()
        resp = await self._client.export_transcription(detail.id, fmt)
        if resp.status_code == 401:
            raise AuthRequiredError("Authentication failed. Please log in.")
        if resp.status_code == 403:
            raise ForbiddenError("Access denied. You don't have permission to export this.")
        if resp.status_code == 404:
            raise NoSummaryError(
                f"{label} export failed: Transcription not found or no summary available.",
                status_code=404,
            )
        if not resp.is_success:
            raise UnknownError(
                extract_detail(resp) or f"Error exporting as {label} (Status: {resp.status_code})",
                status_code=resp.status_code,
            )
        return ExportedFile(
            filename=self._export_filename(resp, detail, fmt),
            content=resp.content,
            media_type=resp.headers.get("Content-Type", fmt.media_type).split(";")[0],
        )

    @staticmethod
    def _export_filename(
        resp: httpx.Response, detail: TranscriptionDetail, fmt: ExportFormat
    ) -> str:
        header = resp.headers.get("Content-Disposition")
        name = filename_from_disposition(header)
        if name:
            return name
        fallback = fallback_export_name(detail.filename, fmt)
        if header:
            logger.warning("Content-Disposition without filename for %s export", fmt.value)
        else:
            logger.warning(
                "Content-Disposition missing for %s export, using %s", fmt.value, fallback
            )
        return fallback
