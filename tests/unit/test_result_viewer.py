"""Unit tests for loading a transcription record and exporting its summary."""

import asyncio

import httpx
import pytest

from src.core.exceptions import ErrorKind, InvalidPayloadError
from src.core.models import ExportFormat
from src.services.result_viewer import (
    ResultViewer,
    fallback_export_name,
    filename_from_disposition,
    parse_detail,
)

PDF_BYTES = b"%PDF-1.7 fake"


@pytest.fixture
def viewer(api_client):
    return ResultViewer(api_client)


@pytest.fixture
def loaded_viewer(viewer, backend, detail_payload):
    backend.add("GET", "/api/transcription/42", json=detail_payload)
    return viewer


class TestFilenameFromDisposition:
    @pytest.mark.parametrize(
        ("header", "expected"),
        [
            ('attachment; filename="standup_summary.pdf"', "standup_summary.pdf"),
            ("attachment; filename=standup_summary.docx", "standup_summary.docx"),
            (
                "attachment; filename=\"fallback.pdf\"; filename*=UTF-8''R%C3%A9union.pdf",
                "Réunion.pdf",
            ),
            ("inline", None),
            ("", None),
            (None, None),
        ],
    )
    def test_variants(self, header, expected):
        assert filename_from_disposition(header) == expected

    def test_fallback_name(self):
        assert fallback_export_name("standup.wav", ExportFormat.pdf) == "standup.wav_summary.pdf"
        assert fallback_export_name(None, ExportFormat.docx) == "transcription_summary.docx"


class TestParseDetail:
    def test_lifts_nested_segments(self, detail_payload):
        detail = parse_detail(detail_payload)

        assert detail.id == 42
        assert [s.text for s in detail.segments] == ["Yesterday I fixed the upload bug."]
        assert detail.summary_text == "Upload bug fixed."
        assert detail.has_summary

    def test_missing_result_means_no_segments(self, detail_payload):
        del detail_payload["result"]

        assert parse_detail(detail_payload).segments == []

    @pytest.mark.parametrize("body", [{"filename": "x.mp3"}, {"id": None}, {"id": ""}, [], None])
    def test_missing_id(self, body):
        with pytest.raises(InvalidPayloadError, match="missing ID"):
            parse_detail(body)

    @pytest.mark.parametrize("segments", ["text", {"0": {}}, [{"transcript": "ok"}, "bad"]])
    def test_malformed_segments(self, detail_payload, segments):
        detail_payload["result"]["transcriptions"] = segments

        with pytest.raises(InvalidPayloadError, match="segment data"):
            parse_detail(detail_payload)

    def test_blank_summary_is_not_exportable(self, detail_payload):
        detail_payload["summarized_text"] = "   "

        assert parse_detail(detail_payload).has_summary is False


class TestLoad:
    @pytest.mark.asyncio
    async def test_success(self, loaded_viewer):
        detail = await loaded_viewer.load(42)

        assert loaded_viewer.detail == detail
        assert loaded_viewer.error is None
        assert loaded_viewer.can_export is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("transcription_id", [None, "", "  "])
    async def test_missing_id_sends_nothing(self, viewer, backend, transcription_id):
        assert await viewer.load(transcription_id) is None

        assert viewer.error == "No transcription ID found in the URL."
        assert viewer.error_kind is ErrorKind.input_validation
        assert backend.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "body", "message", "kind"),
        [
            (401, None, "Authentication failed. Please log in.", ErrorKind.auth_required),
            (
                403,
                None,
                "Access denied. You don't have permission to view this.",
                ErrorKind.forbidden,
            ),
            (404, None, "Transcription not found.", ErrorKind.not_found),
            (500, {"detail": "boom"}, "boom", ErrorKind.unknown),
            (502, None, "Error fetching data (Status: 502)", ErrorKind.unknown),
        ],
    )
    async def test_status_errors(self, viewer, backend, status, body, message, kind):
        backend.add("GET", "/api/transcription/7", status=status, json=body)

        await viewer.load(7)

        assert viewer.detail is None
        assert viewer.error == message
        assert viewer.error_kind is kind
        assert viewer.can_export is False

    @pytest.mark.asyncio
    async def test_invalid_payload_renders_nothing(self, viewer, backend, detail_payload):
        detail_payload["result"]["transcriptions"] = "garbage"
        backend.add("GET", "/api/transcription/42", json=detail_payload)

        await viewer.load("42")

        assert viewer.detail is None
        assert viewer.error_kind is ErrorKind.invalid_payload

    @pytest.mark.asyncio
    async def test_late_response_after_dispose_is_ignored(self, viewer, backend, detail_payload):
        def respond(_request):
            viewer.dispose()
            return httpx.Response(200, json=detail_payload)

        backend.on("GET", "/api/transcription/42", respond)

        await viewer.load(42)

        assert viewer.detail is None


class TestExport:
    @pytest.mark.asyncio
    async def test_pdf_uses_server_filename(self, loaded_viewer, backend):
        backend.add(
            "GET",
            "/api/transcription/42/export/pdf",
            content=PDF_BYTES,
            headers={
                "content-type": "application/pdf",
                "content-disposition": 'attachment; filename="standup_summary.pdf"',
            },
        )
        await loaded_viewer.load(42)

        exported = await loaded_viewer.export(ExportFormat.pdf)

        assert exported.filename == "standup_summary.pdf"
        assert exported.content == PDF_BYTES
        assert exported.media_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_missing_disposition_falls_back(self, loaded_viewer, backend):
        backend.add("GET", "/api/transcription/42/export/docx", content=b"PK\x03\x04")
        await loaded_viewer.load(42)

        exported = await loaded_viewer.export("docx")

        assert exported.filename == "standup.wav_summary.docx"

    @pytest.mark.asyncio
    async def test_no_summary_sends_nothing(self, viewer, backend, detail_payload):
        detail_payload["summarized_text"] = None
        backend.add("GET", "/api/transcription/42", json=detail_payload)
        await viewer.load(42)

        assert viewer.export_enabled(ExportFormat.pdf) is False
        assert await viewer.export(ExportFormat.pdf) is None

        assert viewer.export_errors[ExportFormat.pdf] == (
            "Cannot export: No summary available for this transcription."
        )
        assert backend.calls("GET", "/api/transcription/42/export/pdf") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "message"),
        [
            (404, "PDF export failed: Transcription not found or no summary available."),
            (403, "Access denied. You don't have permission to export this."),
            (401, "Authentication failed. Please log in."),
            (500, "Error exporting as PDF (Status: 500)"),
        ],
    )
    async def test_failures_are_kept_per_format(self, loaded_viewer, backend, status, message):
        backend.add("GET", "/api/transcription/42/export/pdf", status=status)
        backend.add("GET", "/api/transcription/42/export/docx", content=b"PK")
        await loaded_viewer.load(42)

        assert await loaded_viewer.export(ExportFormat.pdf) is None
        assert loaded_viewer.export_errors == {ExportFormat.pdf: message}

        assert await loaded_viewer.export(ExportFormat.docx) is not None
        assert ExportFormat.docx not in loaded_viewer.export_errors

    @pytest.mark.asyncio
    async def test_retry_clears_previous_error(self, loaded_viewer, backend):
        backend.add("GET", "/api/transcription/42/export/pdf", status=500)
        await loaded_viewer.load(42)
        await loaded_viewer.export(ExportFormat.pdf)

        backend.add("GET", "/api/transcription/42/export/pdf", content=PDF_BYTES)
        assert await loaded_viewer.export(ExportFormat.pdf) is not None
        assert loaded_viewer.export_errors == {}

    @pytest.mark.asyncio
    async def test_same_format_is_single_flight(self, loaded_viewer, backend):
        await loaded_viewer.load(42)
        release = asyncio.Event()

        async def slow(_request):
            await release.wait()
            return httpx.Response(200, content=PDF_BYTES)

        backend.on("GET", "/api/transcription/42/export/pdf", slow)

        first = asyncio.ensure_future(loaded_viewer.export(ExportFormat.pdf))
        while not loaded_viewer.is_exporting(ExportFormat.pdf):
            await asyncio.sleep(0)

        assert loaded_viewer.export_enabled(ExportFormat.pdf) is False
        assert loaded_viewer.export_enabled(ExportFormat.docx) is True
        assert await loaded_viewer.export(ExportFormat.pdf) is None

        release.set()
        assert (await first) is not None
        assert len(backend.calls("GET", "/api/transcription/42/export/pdf")) == 1
        assert loaded_viewer.is_exporting(ExportFormat.pdf) is False
