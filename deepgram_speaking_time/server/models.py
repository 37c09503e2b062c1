"""Pydantic request/response models for the callback receiver API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own model. Feature toggles in
TranscriptionRequest map one-to-one onto RequestOptions builder calls.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Response models never expose credentials or raw options objects
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from deepgram_speaking_time.api.options import Redaction


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TranscriptionRequest(BaseModel):
    """Callback-mode submission of a remotely hosted audio file.

    RULES:
    - diarize and punctuate default to True (speaking time needs speakers)
    - alternatives, when given, is passed to set_alternatives_count
    - callback_url must be reachable by the service and route to POST /callback
    """

    audio_url: str = Field(description="Publicly reachable URL of the audio to transcribe.")
    callback_url: str = Field(description="URL the service POSTs the transcript to.")
    diarize: bool = Field(default=True, description="Tag each word with a speaker id.")
    punctuate: bool = Field(default=True, description="Add punctuation and capitalization.")
    alternatives: Optional[float] = Field(
        default=None,
        description="Number of alternative transcripts per channel (rounded, minimum 1).",
    )
    profanity_filter: bool = Field(default=False, description="Mask profanity.")
    redact: List[Redaction] = Field(
        default_factory=list,
        description="Sensitive content to redact: numbers, ssn, pci.",
    )
    keywords: List[str] = Field(default_factory=list, description="Vocabulary hints.")
    search: List[str] = Field(default_factory=list, description="Terms to search for.")

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "audio_url": "https://example.com/call.wav",
                "callback_url": "https://my-host.example.com/callback",
                "diarize": True,
                "punctuate": True,
                "keywords": ["Deepgram"],
            }
        ]
    }}


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SubmissionCreatedResponse(BaseModel):
    request_id: str = Field(description="Service request id; poll GET /transcriptions/{request_id}.")
    status: str = Field(description="Status when recorded; pending unless the delivery already arrived.")


class SpeakerTime(BaseModel):
    speaker: int = Field(description="Speaker id assigned by diarization.")
    seconds: float = Field(description="Cumulative speaking time in seconds.")


class SubmissionResponse(BaseModel):
    """Status and outcome of a callback-mode transcription.

    RULES:
    - transcript and speaking_time are only set when status is 'completed'
    - error is only set when status is 'failed'
    """

    request_id: str = Field(description="Service request id.")
    status: str = Field(description="pending, completed, or failed.")
    created_at: float = Field(description="When the submission was recorded (Unix epoch seconds).")
    audio_url: Optional[str] = Field(default=None, description="Submitted audio URL, if known.")
    transcript: Optional[str] = Field(default=None, description="Best transcript of the first channel.")
    duration: Optional[float] = Field(default=None, description="Audio duration in seconds.")
    speaking_time: List[SpeakerTime] = Field(
        default_factory=list,
        description="Per-speaker speaking time, ascending by speaker id.",
    )
    error: Optional[str] = Field(default=None, description="Failure reason.")


class CallbackReceipt(BaseModel):
    request_id: Optional[str] = Field(default=None, description="Request id the delivery belongs to.")
    status: str = Field(description="Outcome recorded for the delivery.")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
