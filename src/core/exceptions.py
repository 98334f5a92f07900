"""
QuickNote client exception hierarchy.

All client-side errors inherit from QuickNoteError and carry an
``ErrorKind`` so that controllers can retain a classification next to the
user-facing message.
"""

from datetime import UTC, datetime
from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of every failure the client can surface."""

    input_validation = "input_validation"
    invalid_file_type = "invalid_file_type"
    no_file_selected = "no_file_selected"
    auth_required = "auth_required"
    invalid_credentials = "invalid_credentials"
    forbidden = "forbidden"
    not_found = "not_found"
    no_summary = "no_summary"
    bad_request = "bad_request"
    file_too_large = "file_too_large"
    already_exists = "already_exists"
    validation = "validation"
    server_busy = "server_busy"
    unreachable = "unreachable"
    invalid_payload = "invalid_payload"
    unknown = "unknown"

    @property
    def is_soft(self) -> bool:
        """True when the backend may have accepted the work despite the failure."""
        return self in (ErrorKind.server_busy, ErrorKind.unreachable)


class QuickNoteError(Exception):
    """Base exception for all QuickNote client errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred.",
        kind: ErrorKind = ErrorKind.unknown,
        status_code: int | None = None,
    ) -> None:
        self.detail = detail
        self.kind = kind
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Client-side input validation (no network call made)
# ---------------------------------------------------------------------------


class InputValidationError(QuickNoteError):
    """Raised when user input is rejected before any request is sent."""

    def __init__(self, detail: str, kind: ErrorKind = ErrorKind.input_validation) -> None:
        super().__init__(detail=detail, kind=kind)


class InvalidFileTypeError(InputValidationError):
    """Raised when a selected file is not on the audio allow-list."""

    def __init__(
        self,
        detail: str = "Invalid file type. Please select a common audio file "
        "(MP3, WAV, M4A, OGG, FLAC, AAC).",
    ) -> None:
        super().__init__(detail=detail, kind=ErrorKind.invalid_file_type)


class NoFileSelectedError(InputValidationError):
    """Raised when a submission is attempted without a file."""

    def __init__(self, detail: str = "No file selected.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.no_file_selected)


# ---------------------------------------------------------------------------
# Backend status classes
# ---------------------------------------------------------------------------


class AuthRequiredError(QuickNoteError):
    """Backend answered 401: the session is missing or expired."""

    def __init__(self, detail: str = "Authentication error. Please log in again.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.auth_required, status_code=401)


class InvalidCredentialsError(QuickNoteError):
    """Login was rejected as bad client input (400/422)."""

    def __init__(
        self,
        detail: str = "Login failed. Please check your credentials.",
        status_code: int | None = 400,
    ) -> None:
        super().__init__(
            detail=detail, kind=ErrorKind.invalid_credentials, status_code=status_code
        )


class ForbiddenError(QuickNoteError):
    """Backend answered 403: the record belongs to someone else."""

    def __init__(self, detail: str = "Access denied.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.forbidden, status_code=403)


class NotFoundError(QuickNoteError):
    """Backend answered 404 for a record lookup."""

    def __init__(self, detail: str = "Transcription not found.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.not_found, status_code=404)


class NoSummaryError(QuickNoteError):
    """Export requested for a record without a summary."""

    def __init__(
        self,
        detail: str = "Cannot export: No summary available for this transcription.",
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail=detail, kind=ErrorKind.no_summary, status_code=status_code)


class BadRequestError(QuickNoteError):
    """Backend answered 400 for an upload."""

    def __init__(self, detail: str = "Bad request. Please check the input file.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.bad_request, status_code=400)


class FileTooLargeError(QuickNoteError):
    """Backend answered 413 for an upload."""

    def __init__(
        self, detail: str = "File is too large. Please upload a smaller audio file."
    ) -> None:
        super().__init__(detail=detail, kind=ErrorKind.file_too_large, status_code=413)


class AlreadyExistsError(QuickNoteError):
    """Registration hit an existing account."""

    def __init__(self, detail: str = "An account with this email already exists.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.already_exists, status_code=400)


class FieldValidationError(QuickNoteError):
    """Backend rejected one or more input fields.

    ``field_errors`` maps a field name (e.g. ``"email"``) to its message.
    """

    def __init__(
        self,
        detail: str = "Invalid input provided.",
        field_errors: dict[str, str] | None = None,
        status_code: int | None = 422,
    ) -> None:
        self.field_errors = field_errors or {}
        super().__init__(detail=detail, kind=ErrorKind.validation, status_code=status_code)


class InvalidPayloadError(QuickNoteError):
    """A success response carried a body the client cannot use."""

    def __init__(self, detail: str = "Invalid data format received from server.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.invalid_payload)


class UnknownError(QuickNoteError):
    """Any failure outside the known classes."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred.",
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail=detail, kind=ErrorKind.unknown, status_code=status_code)


# ---------------------------------------------------------------------------
# Transport (soft) failures
# ---------------------------------------------------------------------------


class ServerBusyError(QuickNoteError):
    """5xx or timeout: the job may still be running on the server."""

    def __init__(
        self,
        detail: str = "The server took too long to respond.",
        status_code: int | None = None,
    ) -> None:
        super().__init__(detail=detail, kind=ErrorKind.server_busy, status_code=status_code)


class UnreachableError(QuickNoteError):
    """No response was received at all."""

    def __init__(self, detail: str = "Could not connect to the server.") -> None:
        super().__init__(detail=detail, kind=ErrorKind.unreachable)
