"""FastAPI receiver for callback-mode transcriptions.

WHY: In callback mode the service POSTs the finished transcript to a URL
the integrator owns. Something has to listen there, decode the delivery
with the same options the request was submitted with, and turn it into
speaking-time figures a client can poll for.

HOW: A single FastAPI app exposes four endpoints. POST /transcriptions
submits a URL source with a callback and records the options under the
returned request id. POST /callback receives the delivery, looks up those
options (falling back to the receiver defaults), decodes, aggregates
speaking time for the first channel, and records the outcome.
GET /transcriptions/{request_id} reports it.

RULES:
- Deliveries are decoded with decode(options, body), same as the sync path
- Malformed deliveries get 400; service-reported errors are recorded as failed
- Submission transport/remote failures get 502
- The submission store is a module-level singleton
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request

from deepgram_speaking_time import __version__
from deepgram_speaking_time.api.client import transcribe_with_callback
from deepgram_speaking_time.api.decoder import decode
from deepgram_speaking_time.api.models import (
    AlternativesChannel,
    AnyChannel,
    Credentials,
    ErrorSource,
    UrlSource,
    Word,
)
from deepgram_speaking_time.api.options import DEFAULT_OPTIONS, Redaction, RequestOptions
from deepgram_speaking_time.config import CALLBACK_DIARIZE, CALLBACK_PUNCTUATE
from deepgram_speaking_time.core.speaking_time import speaking_time_table
from deepgram_speaking_time.server.models import (
    CallbackReceipt,
    ErrorResponse,
    HealthResponse,
    SpeakerTime,
    SubmissionCreatedResponse,
    SubmissionResponse,
    TranscriptionRequest,
)
from deepgram_speaking_time.server.store import Submission, SubmissionStatus, SubmissionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

submission_store = SubmissionStore()


def default_callback_options() -> RequestOptions:
    """Options used to decode deliveries with no recorded submission."""
    options = DEFAULT_OPTIONS
    if CALLBACK_DIARIZE:
        options = options.diarize()
    if CALLBACK_PUNCTUATE:
        options = options.punctuate()
    return options


async def _periodic_cleanup() -> None:
    """Run submission cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        submission_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Deepgram Speaking Time Receiver",
    description=(
        "Submits callback-mode Deepgram transcriptions, receives the "
        "delivered transcripts, and reports per-speaker speaking time."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


_REDACTORS = {
    Redaction.NUMBERS: RequestOptions.redact_numbers,
    Redaction.SSN: RequestOptions.redact_ssn,
    Redaction.PCI: RequestOptions.redact_pci,
}


def options_from_request(body: TranscriptionRequest) -> RequestOptions:
    """Translate the submission form into a RequestOptions builder chain."""
    options = DEFAULT_OPTIONS
    if body.punctuate:
        options = options.punctuate()
    if body.diarize:
        options = options.diarize()
    if body.alternatives is not None:
        options = options.set_alternatives_count(body.alternatives)
    if body.profanity_filter:
        options = options.filter_profanity()
    for redaction in body.redact:
        options = _REDACTORS[redaction](options)
    if body.keywords:
        options = options.add_keywords(body.keywords)
    if body.search:
        options = options.add_search_terms(body.search)
    return options


def _best_transcript(channel: AnyChannel) -> Tuple[str, List[Word]]:
    """Return (transcript, words) of a channel's best alternative."""
    if isinstance(channel, AlternativesChannel):
        if not channel.alternatives:
            return "", []
        best = channel.alternatives[0]
        return best.transcript, best.words
    return channel.transcript, channel.words


def _peek_request_id(raw: bytes) -> Optional[str]:
    # The request id is needed before decoding to pick the right options.
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    metadata = data.get("metadata")
    if isinstance(metadata, dict) and isinstance(metadata.get("request_id"), str):
        return metadata["request_id"]
    request_id = data.get("request_id")
    return request_id if isinstance(request_id, str) else None


def _submission_to_response(submission: Submission) -> SubmissionResponse:
    return SubmissionResponse(
        request_id=submission.request_id,
        status=submission.status.value,
        created_at=submission.created_at,
        audio_url=submission.audio_url,
        transcript=submission.transcript,
        duration=submission.duration,
        speaking_time=[
            SpeakerTime(speaker=d.speaker, seconds=d.seconds)
            for d in submission.speaking_time
        ],
        error=submission.error,
    )


# ---------------------------------------------------------------------------
# Endpoints: Transcriptions
# ---------------------------------------------------------------------------


@app.post(
    "/transcriptions",
    response_model=SubmissionCreatedResponse,
    status_code=202,
    tags=["transcriptions"],
    summary="Submit a callback-mode transcription",
    description=(
        "Submits a remotely hosted audio file for transcription with delivery "
        "to callback_url. Returns the service request id as soon as the "
        "submission is acknowledged."
    ),
    responses={
        502: {"model": ErrorResponse, "description": "The transcription service rejected or could not be reached"},
        503: {"model": ErrorResponse, "description": "Deepgram credentials are not configured"},
    },
)
async def create_transcription(body: TranscriptionRequest) -> SubmissionCreatedResponse:
    try:
        credentials = Credentials.from_env()
    except ValueError as exc:
        raise HTTPException(status_code=503, detail=str(exc))

    options = options_from_request(body).with_callback_url(body.callback_url)
    result = await transcribe_with_callback(
        credentials, options, UrlSource(body.audio_url), body.callback_url
    )
    if not result.ok:
        raise HTTPException(
            status_code=502,
            detail="Submission failed ({}): {}".format(result.source.value, result.reason),
        )

    submission = submission_store.record_submission(
        result.request_id, options, audio_url=body.audio_url
    )
    return SubmissionCreatedResponse(request_id=result.request_id, status=submission.status.value)


@app.get(
    "/transcriptions/{request_id}",
    response_model=SubmissionResponse,
    tags=["transcriptions"],
    summary="Get transcription status and speaking time",
    responses={404: {"model": ErrorResponse, "description": "Unknown request id"}},
)
async def get_transcription(request_id: str) -> SubmissionResponse:
    submission = submission_store.get(request_id)
    if submission is None:
        raise HTTPException(
            status_code=404,
            detail="Transcription '{}' not found".format(request_id),
        )
    return _submission_to_response(submission)


# ---------------------------------------------------------------------------
# Endpoints: Callback delivery
# ---------------------------------------------------------------------------


@app.post(
    "/callback",
    response_model=CallbackReceipt,
    tags=["callback"],
    summary="Receive a transcript delivery",
    description=(
        "Endpoint the transcription service POSTs finished transcripts to. "
        "The body has the same shape as a synchronous response."
    ),
    responses={400: {"model": ErrorResponse, "description": "Malformed delivery body"}},
)
async def receive_callback(request: Request) -> CallbackReceipt:
    raw = await request.body()
    request_id = _peek_request_id(raw)
    options = submission_store.options_for(request_id) or default_callback_options()

    result = decode(options, raw)

    if not result.ok:
        if result.source is ErrorSource.DECODE:
            logger.warning("Rejected malformed callback delivery: %s", result.reason)
            raise HTTPException(status_code=400, detail=result.reason)
        if request_id is not None:
            submission_store.mark_failed(request_id, result.reason)
        return CallbackReceipt(request_id=request_id, status=SubmissionStatus.FAILED.value)

    request_id = result.metadata.request_id
    transcript: str = ""
    words: List[Word] = []
    if result.channels:
        transcript, words = _best_transcript(result.channels[0])
    table = speaking_time_table(words)

    submission_store.mark_completed(
        request_id,
        transcript=transcript,
        duration=result.metadata.duration,
        speaking_time=table,
    )
    logger.info(
        "Callback for %s: %d speakers over %.1fs",
        request_id, len(table), result.metadata.duration,
    )
    return CallbackReceipt(request_id=request_id, status=SubmissionStatus.COMPLETED.value)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check for load balancers and tunnels.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the deepgram-callback-server console script."""
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
