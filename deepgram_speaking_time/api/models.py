"""Deepgram request inputs and response dataclasses.

WHY: The Deepgram pre-recorded API returns nested JSON whose shape depends
on the requested features. Typed dataclasses make every shape explicit,
enable IDE autocompletion, and let callers branch on the result type
instead of probing dict keys.

HOW: Request-side values (Credentials, UrlSource, BufferSource) describe
what to send. Response-side dataclasses map 1:1 to Deepgram JSON objects
via from_dict factories. Channels come in four shapes, chosen by the
decoder from the RequestOptions flags. Results are a small tagged union:
TranscriptSuccess | TranscriptError (| CallbackAccepted for callback mode).

RULES:
- speaker is None unless diarization was requested
- punctuated_word is None unless punctuation was requested
- Channel / SearchChannel carry the best alternative promoted to the top
- AlternativesChannel / AlternativesSearchChannel carry every alternative
- Errors are values (TranscriptError), never raised
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Union

from deepgram_speaking_time.config import load_credentials


# ---------------------------------------------------------------------------
# Request inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credentials:
    """Deepgram API key pair used for Basic authentication."""

    api_key: str
    api_secret: str

    @classmethod
    def from_env(cls) -> Credentials:
        """Load DG_KEY / DG_SECRET from the environment (.env supported)."""
        key, secret = load_credentials()
        return cls(api_key=key, api_secret=secret)

    def __repr__(self) -> str:
        return "Credentials(api_key='***', api_secret='***')"


@dataclass(frozen=True)
class UrlSource:
    """Audio the service fetches itself from a reachable URL.

    Sent as a JSON envelope ``{"url": ...}`` with application/json.
    """

    url: str
    kind: ClassVar[str] = "url"

    @property
    def content_type(self) -> str:
        return "application/json"

    def payload(self) -> bytes:
        return json.dumps({"url": self.url}).encode("utf-8")


@dataclass(frozen=True)
class BufferSource:
    """Raw audio bytes uploaded in the request body."""

    data: bytes
    mimetype: str
    kind: ClassVar[str] = "buffer"

    @property
    def content_type(self) -> str:
        return self.mimetype

    def payload(self) -> bytes:
        return self.data

    def __repr__(self) -> str:
        return "BufferSource(<{} bytes>, mimetype={!r})".format(
            len(self.data), self.mimetype
        )


AudioSource = Union[UrlSource, BufferSource]


# ---------------------------------------------------------------------------
# Response building blocks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Word:
    """A single recognized word with timing and optional speaker tag.

    RULES:
    - start / end are float seconds from the start of the audio
    - confidence is 0.0–1.0
    - speaker is a non-negative int only when diarization was enabled
    - punctuated_word only when punctuation was enabled
    """

    text: str
    start: float
    end: float
    confidence: float
    speaker: Optional[int] = None
    punctuated_word: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Word:
        speaker = data.get("speaker")
        return cls(
            text=data["word"],
            start=float(data["start"]),
            end=float(data["end"]),
            confidence=float(data["confidence"]),
            speaker=int(speaker) if speaker is not None else None,
            punctuated_word=data.get("punctuated_word"),
        )


@dataclass(frozen=True)
class Alternative:
    """One candidate transcription of a channel."""

    transcript: str
    confidence: float
    words: List[Word]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Alternative:
        return cls(
            transcript=data["transcript"],
            confidence=float(data["confidence"]),
            words=[Word.from_dict(w) for w in data["words"]],
        )


@dataclass(frozen=True)
class SearchHit:
    confidence: float
    start: float
    end: float
    snippet: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SearchHit:
        return cls(
            confidence=float(data["confidence"]),
            start=float(data["start"]),
            end=float(data["end"]),
            snippet=data["snippet"],
        )


@dataclass(frozen=True)
class SearchResult:
    """Hits found in one channel for one requested search term."""

    query: str
    hits: List[SearchHit]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SearchResult:
        return cls(
            query=data["query"],
            hits=[SearchHit.from_dict(h) for h in data["hits"]],
        )


@dataclass(frozen=True)
class Metadata:
    """Request-level metadata returned with every successful transcript.

    RULES:
    - duration is the audio length in seconds
    - channels is the number of audio channels transcribed
    """

    request_id: str
    transaction_key: str
    sha256: str
    created: str
    duration: float
    channels: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Metadata:
        return cls(
            request_id=data["request_id"],
            transaction_key=data["transaction_key"],
            sha256=data["sha256"],
            created=data["created"],
            duration=float(data["duration"]),
            channels=int(data["channels"]),
        )


# ---------------------------------------------------------------------------
# Channel shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Channel:
    """A channel collapsed to its best alternative.

    Produced when alternatives were not explicitly requested and search
    was not requested.
    """

    transcript: str
    confidence: float
    words: List[Word]


@dataclass(frozen=True)
class SearchChannel(Channel):
    """Best-alternative channel that also keeps its search hits."""

    search: List[SearchResult]


@dataclass(frozen=True)
class AlternativesChannel:
    """A channel keeping every alternative the service returned."""

    alternatives: List[Alternative]


@dataclass(frozen=True)
class AlternativesSearchChannel(AlternativesChannel):
    search: List[SearchResult]


AnyChannel = Union[Channel, SearchChannel, AlternativesChannel, AlternativesSearchChannel]


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class ErrorSource(str, enum.Enum):
    """Where a TranscriptError originated.

    RULES:
    - transport: connection, DNS, stream or timeout failure
    - remote: the service answered with an error payload
    - decode: the body was not a well-formed transcript response
    """

    TRANSPORT = "transport"
    REMOTE = "remote"
    DECODE = "decode"


@dataclass(frozen=True)
class TranscriptError:
    reason: str
    source: ErrorSource
    kind: ClassVar[str] = "error"
    ok: ClassVar[bool] = False


@dataclass(frozen=True)
class TranscriptSuccess:
    metadata: Metadata
    channels: List[AnyChannel]
    kind: ClassVar[str] = "success"
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class CallbackAccepted:
    """Acknowledgement of a callback-mode submission.

    The transcript itself is delivered later to the callback URL.
    """

    request_id: str
    kind: ClassVar[str] = "success"
    ok: ClassVar[bool] = True


TranscriptResult = Union[TranscriptSuccess, TranscriptError]
SubmissionResult = Union[CallbackAccepted, TranscriptError]
