"""Deepgram speaking-time client — option negotiation and diarization analytics.

WHY: The Deepgram pre-recorded API returns differently shaped JSON depending
on which features were requested (alternatives, search, diarization,
punctuation). Callers need a way to build requests whose response shape is
known up front, and a way to turn diarized words into per-speaker talk time.

HOW: Three layers — api (immutable options, route building, decoding, the
async HTTP client), core (speaking-time aggregation), and server (a FastAPI
receiver for callback-mode deliveries). Each layer is independently testable.

RULES:
- RequestOptions values are immutable; every builder call returns a new one
- Every transcription entry point returns a result value, never raises
- The decoder always needs the options that produced the request
"""

__version__ = "0.1.0"
