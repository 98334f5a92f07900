"""UI utility functions."""

import asyncio
from collections.abc import Coroutine
from datetime import datetime
from typing import Any, TypeVar

from src.core.models import AudioFile

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Drive a service coroutine from the synchronous Streamlit script."""
    return asyncio.run(coro)


def to_audio_file(uploaded: Any) -> AudioFile | None:
    """Convert a Streamlit ``UploadedFile`` into an ``AudioFile``."""
    if uploaded is None:
        return None
    return AudioFile(
        filename=uploaded.name,
        content=uploaded.getvalue(),
        content_type=uploaded.type or None,
    )


def format_created_at(value: datetime | None) -> str:
    if value is None:
        return "N/A"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")
