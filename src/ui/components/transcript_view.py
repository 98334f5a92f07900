"""
Transcript and summary display components.
"""

import html

import streamlit as st

from src.core.models import Segment
from src.core.utils import format_time, speaker_color, speaker_label


def render_segment(segment: Segment) -> None:
    """Render one speaker-attributed segment as a row: time range, speaker, text."""
    color = speaker_color(segment.speaker_id)
    time_range = f"{format_time(segment.start_time)} - {format_time(segment.end_time)}"

    col_meta, col_text = st.columns([1, 4])
    with col_meta:
        st.caption(time_range)
        st.markdown(
            f'<span style="color:{color};font-weight:600">'
            f"{html.escape(speaker_label(segment.speaker_id))}</span>",
            unsafe_allow_html=True,
        )
    with col_text:
        if segment.text:
            st.markdown(
                f'<p style="color:{color};white-space:pre-wrap">{html.escape(segment.text)}</p>',
                unsafe_allow_html=True,
            )
        else:
            st.caption("_(No text transcribed)_")


def render_transcript(segments: list[Segment], title: str = "Full Transcription") -> None:
    """Render segments in server order inside a bordered, scrollable container."""
    st.subheader(title)
    if not segments:
        st.info("No transcription segments available for this record.")
        return

    st.caption(f"{len(segments)} segment(s)")
    with st.container(border=True, height=600):
        for segment in segments:
            render_segment(segment)
            st.divider()


def render_summary(summary_text: str | None, title: str = "Summary") -> None:
    st.subheader(title)
    if summary_text and summary_text.strip():
        with st.container(border=True):
            st.markdown(summary_text)
    else:
        st.info("No summary available for this transcription.")
