"""
Transcription workflow — the upload / submit / await / render state machine.

States: idle -> validating -> submitting -> {succeeded, failed_hard, failed_soft}

``classify_response()`` is a pure function from (status, body, transport
error) to an ``Outcome``; ``WorkflowController`` owns the job state and
applies exactly one outcome per submission.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from src.core.config import get_settings
from src.core.exceptions import (
    AuthRequiredError,
    BadRequestError,
    ErrorKind,
    FileTooLargeError,
    InvalidFileTypeError,
    NoFileSelectedError,
    QuickNoteError,
    ServerBusyError,
)
from src.core.models import AudioFile, Segment, SubmissionState
from src.services.api_client import APIClient, detail_from_body, parse_json

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = (
    "Received successful response, but no valid transcription or summary data was found."
)
PROCESSING_MESSAGE = (
    "Audio processing may take a moment. Please check the history tab for updates."
)
TIMEOUT_MESSAGE = (
    "The server took too long to respond. Your file might still be processing. "
    "Please check the history page later for results."
)
UNREACHABLE_MESSAGE = (
    "Could not connect to the server. It might be busy or unavailable. "
    "Please check the history page later, as the process might have started."
)
EMPTY_FILE_MESSAGE = "The selected file is empty. Please choose another audio file."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Outcome:
    """Terminal result of one submission."""

    state: SubmissionState
    kind: ErrorKind | None = None
    message: str | None = None
    segments: tuple[Segment, ...] = ()
    summary_text: str | None = None


def normalize_segments(raw: Any) -> list[Segment]:
    """Convert the backend ``transcriptions`` array into canonical segments.

    Server order is preserved. Entries that are not objects, or that fail
    validation, are dropped with a warning.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("Transcription segments missing or invalid: %r", type(raw).__name__)
        return []

    segments = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Skipping segment %d: not an object", index)
            continue
        try:
            segments.append(Segment.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping segment %d: %s", index, exc.errors()[0]["msg"])
    return segments


def _failure(exc: QuickNoteError) -> Outcome:
    state = SubmissionState.failed_soft if exc.kind.is_soft else SubmissionState.failed_hard
    return Outcome(state=state, kind=exc.kind, message=exc.detail)


def classify_response(
    status: int | None,
    body: Any = None,
    error: QuickNoteError | None = None,
) -> Outcome:
    """Map a transcription response (or transport failure) to an outcome.

    Args:
        status: HTTP status, or ``None`` when no response was received.
        body: Decoded JSON body (``None`` when empty or not JSON).
        error: Transport error raised instead of a response.

    Returns:
        The single outcome to apply to the job.
    """
    if error is not None or status is None:
        if isinstance(error, ServerBusyError):
            return _failure(ServerBusyError(TIMEOUT_MESSAGE))
        return Outcome(
            state=SubmissionState.failed_soft,
            kind=ErrorKind.unreachable,
            message=UNREACHABLE_MESSAGE,
        )

    if 200 <= status < 300:
        data = body if isinstance(body, dict) else {}
        segments = normalize_segments(data.get("transcriptions"))
        summary = data.get("summarized_text")
        summary = summary if isinstance(summary, str) and summary.strip() else None
        if not segments and summary is None:
            return Outcome(state=SubmissionState.succeeded, message=NO_DATA_MESSAGE)
        return Outcome(
            state=SubmissionState.succeeded,
            segments=tuple(segments),
            summary_text=summary,
        )

    if status == 400:
        return _failure(BadRequestError())
    if status == 401:
        return _failure(AuthRequiredError())
    if status == 413:
        return _failure(FileTooLargeError())
    if status == 500:
        return _failure(ServerBusyError(PROCESSING_MESSAGE, status_code=status))
    if status == 504:
        return _failure(ServerBusyError(TIMEOUT_MESSAGE, status_code=status))
    if 500 < status < 600:
        return _failure(
            ServerBusyError(
                f"The server encountered an error ({status}). "
                "Please check the history page later for results.",
                status_code=status,
            )
        )

    return Outcome(
        state=SubmissionState.failed_hard,
        kind=ErrorKind.unknown,
        message=detail_from_body(body) or f"Request failed with status {status}.",
    )


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


@dataclass
class TranscriptionJob:
    """Workflow-local state for the currently selected file."""

    file: AudioFile | None = None
    state: SubmissionState = SubmissionState.idle
    segments: list[Segment] = field(default_factory=list)
    summary_text: str | None = None
    message: str | None = None
    error_kind: ErrorKind | None = None

    def clear_results(self) -> None:
        self.segments = []
        self.summary_text = None
        self.message = None
        self.error_kind = None


class WorkflowController:
    """Drives a single transcription submission at a time."""

    def __init__(
        self,
        client: APIClient,
        allowed_extensions: list[str] | None = None,
    ) -> None:
        self._client = client
        exts = allowed_extensions or get_settings().allowed_audio_extensions
        self._allowed_extensions = {ext.lower().lstrip(".") for ext in exts}
        self._job = TranscriptionJob()
        self._disposed = False

    # -- read side --

    @property
    def job(self) -> TranscriptionJob:
        return self._job

    @property
    def state(self) -> SubmissionState:
        return self._job.state

    @property
    def is_busy(self) -> bool:
        return self._job.state.in_flight

    @property
    def can_submit(self) -> bool:
        return self._job.file is not None and not self.is_busy and not self._disposed

    @property
    def show_transcript(self) -> bool:
        return self._job.state is SubmissionState.succeeded and bool(self._job.segments)

    @property
    def show_summary(self) -> bool:
        return self._job.state is SubmissionState.succeeded and bool(self._job.summary_text)

    @property
    def show_history_link(self) -> bool:
        return self._job.state is SubmissionState.failed_soft

    # -- transitions --

    def is_audio(self, audio: AudioFile) -> bool:
        if audio.content_type and audio.content_type.lower().startswith("audio/"):
            return True
        return audio.extension in self._allowed_extensions

    def select_file(self, audio: AudioFile | None) -> bool:
        """Select (or with ``None``, de-select) the file to transcribe.

        Any selection resets the job to idle. Returns ``True`` when a file is
        now selected. Ignored while a submission is in flight.
        """
        if self.is_busy:
            logger.debug("File selection ignored: submission in flight")
            return False

        self._job = TranscriptionJob()
        if audio is None:
            return False

        if not self.is_audio(audio):
            err = InvalidFileTypeError()
            logger.info("Rejected %s (%s)", audio.filename, audio.content_type)
            self._job.message = err.detail
            self._job.error_kind = err.kind
            return False

        logger.debug("Selected %s (%d bytes)", audio.filename, audio.size)
        self._job.file = audio
        return True

    def acknowledge(self) -> None:
        """Return a finished job to idle, keeping the selected file."""
        if self._job.state.terminal:
            self._job.clear_results()
            self._job.state = SubmissionState.idle

    def dispose(self) -> None:
        """Mark the owner as gone; late responses are discarded."""
        self._disposed = True

    async def submit(self) -> Outcome | None:
        """Upload the selected file and apply the classified outcome.

        Returns:
            The applied outcome, or ``None`` when nothing was submitted (no
            file, a submission already in flight, or the response arrived
            after ``dispose()``).
        """
        if self._disposed:
            return None
        if self.is_busy:
            logger.debug("Submit ignored: submission in flight")
            return None

        job = self._job
        if job.file is None:
            err = NoFileSelectedError()
            job.message = err.detail
            job.error_kind = err.kind
            return None

        job.clear_results()
        job.state = SubmissionState.validating
        if job.file.size == 0:
            outcome = Outcome(
                state=SubmissionState.failed_hard,
                kind=ErrorKind.input_validation,
                message=EMPTY_FILE_MESSAGE,
            )
            self._apply(outcome)
            return outcome

        job.state = SubmissionState.submitting
        logger.info("Submitting %s for transcription", job.file.filename)
        outcome = None
        try:
            outcome = await self._request(job.file)
        finally:
            # An unexpected error must not leave the job in flight
            if outcome is None and job.state.in_flight:
                logger.error("Transcription of %s aborted unexpectedly", job.file.filename)
                job.state = SubmissionState.failed_hard
                job.error_kind = ErrorKind.unknown
                job.message = UNEXPECTED_ERROR_MESSAGE

        if self._disposed or job is not self._job:
            logger.debug("Discarding transcription response: owner gone")
            return None

        self._apply(outcome)
        logger.info("Transcription finished: %s (%s)", outcome.state, outcome.kind or "ok")
        return outcome

    async def _request(self, audio: AudioFile) -> Outcome:
        try:
            resp = await self._client.transcribe(audio)
        except QuickNoteError as exc:
            return classify_response(None, error=exc)

        body = parse_json(resp)
        if resp.status_code >= 500:
            logger.error(
                "Server error %s during transcription: %s",
                resp.status_code,
                detail_from_body(body) or "No detail provided",
            )
        return classify_response(resp.status_code, body)

    def _apply(self, outcome: Outcome) -> None:
        job = self._job
        job.state = outcome.state
        job.error_kind = outcome.kind
        job.message = outcome.message
        job.segments = list(outcome.segments)
        job.summary_text = outcome.summary_text
