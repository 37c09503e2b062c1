"""Tests for the FastAPI callback receiver.

WHY: Callback deliveries must be decoded with the same options the
request was submitted with; a mismatch silently changes channel shape
and breaks the speaking-time summary.

HOW: FastAPI TestClient exercises each endpoint in-process. The outbound
submission is patched with an AsyncMock so the service is never called.
The submission store is cleared before each test.

RULES:
- Deepgram is never called (transcribe_with_callback is mocked)
- Each test is independent — the store is reset around every test
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from deepgram_speaking_time.api.models import CallbackAccepted, ErrorSource, TranscriptError
from deepgram_speaking_time.api.options import Redaction
from deepgram_speaking_time.server.app import (
    app,
    options_from_request,
    submission_store,
)
from deepgram_speaking_time.server.models import TranscriptionRequest
from deepgram_speaking_time.server.store import SubmissionStatus


@pytest.fixture(autouse=True)
def _reset_store():
    """Clear all submissions before and after each test."""
    submission_store.clear()
    yield
    submission_store.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def env_credentials(monkeypatch):
    monkeypatch.setenv("DG_KEY", "key")
    monkeypatch.setenv("DG_SECRET", "secret")


def _submit(client, **overrides):
    body = {
        "audio_url": "https://audio.example.com/call.wav",
        "callback_url": "https://me.example.com/callback",
    }
    body.update(overrides)
    return client.post("/transcriptions", json=body)


class TestOptionsFromRequest:
    def test_defaults_diarize_and_punctuate(self):
        options = options_from_request(
            TranscriptionRequest(audio_url="https://a", callback_url="https://cb")
        )
        assert options.diarization.value == "diarized"
        assert options.punctuation.value == "punctuated"
        assert options.alternatives_explicitly_set is False

    def test_all_toggles(self):
        options = options_from_request(
            TranscriptionRequest(
                audio_url="https://a",
                callback_url="https://cb",
                alternatives=2,
                profanity_filter=True,
                redact=["numbers", "pci"],
                keywords=["Deepgram"],
                search=["hello"],
            )
        )
        assert options.alternatives_count == 2
        assert options.profanity_filter is True
        assert options.redactions == frozenset({Redaction.NUMBERS, Redaction.PCI})
        assert options.keywords[0].word == "Deepgram"
        assert options.search_terms == ("hello",)


class TestSubmit:
    """POST /transcriptions"""

    def test_submit_records_options(self, client, env_credentials):
        mock = AsyncMock(return_value=CallbackAccepted(request_id="req-1"))
        with patch("deepgram_speaking_time.server.app.transcribe_with_callback", new=mock):
            resp = _submit(client, search=["hi"])

        assert resp.status_code == 202
        assert resp.json() == {"request_id": "req-1", "status": "pending"}

        submission = submission_store.get("req-1")
        assert submission is not None
        assert submission.status is SubmissionStatus.PENDING
        assert submission.options.search_explicitly_set is True
        assert submission.options.callback_url == "https://me.example.com/callback"

        credentials, options, source, callback_url = mock.await_args.args
        assert credentials.api_key == "key"
        assert source.url == "https://audio.example.com/call.wav"
        assert callback_url == "https://me.example.com/callback"

    def test_delivery_before_recording_is_kept(self, client, env_credentials):
        submission_store.mark_completed("req-1", transcript="hi", duration=1.0, speaking_time=[])
        mock = AsyncMock(return_value=CallbackAccepted(request_id="req-1"))
        with patch("deepgram_speaking_time.server.app.transcribe_with_callback", new=mock):
            resp = _submit(client)

        assert resp.status_code == 202
        assert resp.json() == {"request_id": "req-1", "status": "completed"}
        submission = submission_store.get("req-1")
        assert submission.transcript == "hi"
        assert submission.audio_url == "https://audio.example.com/call.wav"

    def test_submission_failure_is_502(self, client, env_credentials):
        mock = AsyncMock(
            return_value=TranscriptError(reason="ConnectError: refused", source=ErrorSource.TRANSPORT)
        )
        with patch("deepgram_speaking_time.server.app.transcribe_with_callback", new=mock):
            resp = _submit(client)

        assert resp.status_code == 502
        assert "transport" in resp.json()["detail"]

    def test_missing_credentials_is_503(self, client, monkeypatch):
        monkeypatch.delenv("DG_KEY", raising=False)
        monkeypatch.delenv("DG_SECRET", raising=False)
        resp = _submit(client)
        assert resp.status_code == 503


class TestCallback:
    """POST /callback"""

    def test_delivery_for_unknown_request_uses_defaults(self, client, raw_response):
        resp = client.post("/callback", json=raw_response)
        assert resp.status_code == 200
        request_id = raw_response["metadata"]["request_id"]
        assert resp.json() == {"request_id": request_id, "status": "completed"}

        body = client.get("/transcriptions/{}".format(request_id)).json()
        assert body["status"] == "completed"
        assert body["transcript"] == "Hi there. Hello."
        assert body["duration"] == pytest.approx(4.2)
        # speaker 0: 2.0 - 0.0 ; speaker 1: 4.0 - 2.0
        assert body["speaking_time"] == [
            {"speaker": 0, "seconds": pytest.approx(2.0)},
            {"speaker": 1, "seconds": pytest.approx(2.0)},
        ]

    def test_delivery_uses_recorded_options(self, client, raw_response):
        from deepgram_speaking_time.api.options import DEFAULT_OPTIONS

        request_id = raw_response["metadata"]["request_id"]
        submission_store.record_submission(
            request_id, DEFAULT_OPTIONS.diarize().set_alternatives_count(2)
        )
        with patch("deepgram_speaking_time.server.app.decode") as mock_decode:
            from deepgram_speaking_time.api.decoder import decode as real_decode

            mock_decode.side_effect = real_decode
            resp = client.post("/callback", json=raw_response)

        assert resp.status_code == 200
        used_options = mock_decode.call_args.args[0]
        assert used_options.alternatives_explicitly_set is True
        body = client.get("/transcriptions/{}".format(request_id)).json()
        assert body["transcript"] == "Hi there. Hello."
        assert len(body["speaking_time"]) == 2

    def test_malformed_delivery_is_400(self, client):
        resp = client.post(
            "/callback",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400

    def test_error_delivery_marks_failed(self, client, error_response):
        submission_store.record_submission("req-9", options_from_request(
            TranscriptionRequest(audio_url="https://a", callback_url="https://cb")
        ))
        error_response["request_id"] = "req-9"
        resp = client.post("/callback", json=error_response)

        assert resp.status_code == 200
        assert resp.json()["status"] == "failed"
        body = client.get("/transcriptions/req-9").json()
        assert body["status"] == "failed"
        assert "Could not determine the audio format" in body["error"]


class TestGetTranscription:
    def test_pending(self, client):
        from deepgram_speaking_time.api.options import DEFAULT_OPTIONS

        submission_store.record_submission("req-2", DEFAULT_OPTIONS, audio_url="https://a")
        body = client.get("/transcriptions/req-2").json()
        assert body["status"] == "pending"
        assert body["audio_url"] == "https://a"
        assert body["speaking_time"] == []

    def test_unknown_is_404(self, client):
        resp = client.get("/transcriptions/nope")
        assert resp.status_code == 404
        assert "not found" in resp.json()["detail"]


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
