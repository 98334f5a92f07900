"""Shared display helpers for the QuickNote client."""

import re

SPEAKER_COLORS = (
    "#67e8f9",  # cyan
    "#f9a8d4",  # pink
    "#bef264",  # lime
    "#fde047",  # yellow
    "#fdba74",  # orange
    "#d8b4fe",  # purple
    "#5eead4",  # teal
    "#a5b4fc",  # indigo
)
FALLBACK_SPEAKER_COLOR = "#9ca3af"


def format_time(value: float | int | str | None) -> str:
    """Render a segment timestamp: seconds with two decimals, strings as-is."""
    if isinstance(value, bool):
        return "??.??"
    if isinstance(value, int | float):
        return f"{value:.2f}"
    return value or "??.??"


def speaker_label(speaker_id: str | int) -> str:
    return f"Speaker {speaker_id}"


def speaker_color(speaker_id: str | int) -> str:
    """Pick a stable palette color for a speaker.

    Digits inside the id select the bucket ("SPEAKER_01" -> 1), ids naming an
    unknown speaker get the fallback, any other string is hashed.
    """
    if isinstance(speaker_id, bool):
        return FALLBACK_SPEAKER_COLOR
    if isinstance(speaker_id, int):
        numeric = speaker_id
    else:
        match = re.search(r"\d+", speaker_id)
        if match:
            numeric = int(match.group(0))
        elif "unknown" in speaker_id.lower():
            return FALLBACK_SPEAKER_COLOR
        else:
            # Java-style 32-bit string hash, so colors survive process restarts
            h = 0
            for ch in speaker_id:
                h = (h * 31 + ord(ch)) & 0xFFFFFFFF
            numeric = abs(h - (1 << 32) if h & 0x80000000 else h)
    if numeric < 0:
        return FALLBACK_SPEAKER_COLOR
    return SPEAKER_COLORS[numeric % len(SPEAKER_COLORS)]
