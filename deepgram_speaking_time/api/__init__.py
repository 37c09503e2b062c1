"""Deepgram API package — options, routing, decoding, and the async client.

WHY: Building a request and decoding its response are two halves of one
contract: the options that shape the request also shape the response.
Keeping them in one package makes that pairing explicit.

HOW: options.py holds the immutable RequestOptions builder, routes.py turns
options into a query string, models.py defines request inputs and response
dataclasses, decoder.py reshapes raw JSON, client.py runs the HTTP exchange.

RULES:
- All HTTP calls go through DeepgramClient (no direct httpx usage elsewhere)
- Every public entry point returns a result value instead of raising
"""

from deepgram_speaking_time.api.client import (
    DeepgramClient,
    DeepgramTranscriber,
    transcribe,
    transcribe_with_callback,
)
from deepgram_speaking_time.api.decoder import decode, decode_submission
from deepgram_speaking_time.api.models import (
    BufferSource,
    CallbackAccepted,
    Credentials,
    ErrorSource,
    TranscriptError,
    TranscriptSuccess,
    UrlSource,
    Word,
)
from deepgram_speaking_time.api.options import DEFAULT_OPTIONS, RequestOptions
from deepgram_speaking_time.api.routes import build_route

__all__ = [
    "BufferSource",
    "CallbackAccepted",
    "Credentials",
    "DEFAULT_OPTIONS",
    "DeepgramClient",
    "DeepgramTranscriber",
    "ErrorSource",
    "RequestOptions",
    "TranscriptError",
    "TranscriptSuccess",
    "UrlSource",
    "Word",
    "build_route",
    "decode",
    "decode_submission",
    "transcribe",
    "transcribe_with_callback",
]
