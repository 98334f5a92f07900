"""
Pydantic v2 models for backend payloads and client-side state.

Backend responses are normalized here, right after deserialization, so the
rest of the client only sees one canonical shape (e.g. both spellings of the
segment timestamp fields end up in ``Segment.start_time``).
"""

from datetime import UTC, datetime
from enum import StrEnum
from pathlib import PurePath
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class LoadingState(StrEnum):
    """Whether the initial session probe has completed."""

    checking = "checking"
    resolved = "resolved"


class UserIdentity(BaseModel):
    """Identity returned by ``GET /api/auth/session``.

    Opaque to the client: unknown fields are kept as-is and the value is
    immutable once received.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: int | str | None = None
    email: str | None = None


class Credentials(BaseModel):
    """Login form input. The backend expects the email under ``username``."""

    username: str
    password: SecretStr


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class SubmissionState(StrEnum):
    """States of a single transcription submission."""

    idle = "idle"
    validating = "validating"
    submitting = "submitting"
    succeeded = "succeeded"
    failed_hard = "failed_hard"
    failed_soft = "failed_soft"

    @property
    def in_flight(self) -> bool:
        return self in (SubmissionState.validating, SubmissionState.submitting)

    @property
    def terminal(self) -> bool:
        return self in (
            SubmissionState.succeeded,
            SubmissionState.failed_hard,
            SubmissionState.failed_soft,
        )


class Segment(BaseModel):
    """One speaker-attributed, time-bounded span of transcribed text.

    The backend uses two spellings for the same fields
    (``start_timestamp``/``start_time``, ``end_timestamp``/``end_time``,
    ``text_transcript``/``transcript``); both are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    speaker_id: str | int = "unknown"
    start_time: float | str | None = Field(
        default=None, validation_alias=AliasChoices("start_timestamp", "start_time")
    )
    end_time: float | str | None = Field(
        default=None, validation_alias=AliasChoices("end_timestamp", "end_time")
    )
    text: str = Field(
        default="", validation_alias=AliasChoices("text_transcript", "transcript", "text")
    )

    @field_validator("speaker_id", mode="before")
    @classmethod
    def _default_speaker(cls, value: Any) -> Any:
        return "unknown" if value is None or value == "" else value

    @field_validator("text", mode="before")
    @classmethod
    def _default_text(cls, value: Any) -> Any:
        return "" if value is None else value


class AudioFile(BaseModel):
    """A file picked by the user for upload."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes = Field(repr=False)
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lstrip(".").lower()

    @property
    def size(self) -> int:
        return len(self.content)


# ---------------------------------------------------------------------------
# History / detail
# ---------------------------------------------------------------------------


class HistoryRecord(BaseModel):
    """One row of ``GET /api/history``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | str
    filename: str | None = None
    created_at: datetime | None = None
    status: str | None = None

    @field_validator("created_at", mode="wrap")
    @classmethod
    def _lenient_timestamp(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        """Unparseable timestamps become ``None`` so the row still shows (sorted last)."""
        if value is None or value == "":
            return None
        try:
            parsed = handler(value)
        except ValidationError:
            return None
        # The backend stores naive UTC timestamps
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed

    @property
    def display_name(self) -> str:
        return self.filename or "Untitled Transcription"


class TranscriptionDetail(HistoryRecord):
    """``GET /api/transcription/{id}``: a history row plus its results."""

    segments: list[Segment] = Field(default_factory=list)
    summary_text: str | None = Field(
        default=None, validation_alias=AliasChoices("summarized_text", "summary_text")
    )

    @model_validator(mode="before")
    @classmethod
    def _lift_result_segments(cls, data: Any) -> Any:
        if isinstance(data, dict) and "segments" not in data:
            result = data.get("result")
            if isinstance(result, dict) and result.get("transcriptions") is not None:
                data = {**data, "segments": result["transcriptions"]}
        return data

    @field_validator("summary_text", mode="before")
    @classmethod
    def _non_string_summary(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @property
    def has_summary(self) -> bool:
        return bool(self.summary_text and self.summary_text.strip())


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class ExportFormat(StrEnum):
    """Document formats the backend can render a summary into."""

    pdf = "pdf"
    docx = "docx"

    @property
    def media_type(self) -> str:
        if self is ExportFormat.pdf:
            return "application/pdf"
        return "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class ExportedFile(BaseModel):
    """A downloaded export, ready to hand to the user."""

    filename: str
    content: bytes = Field(repr=False)
    media_type: str
