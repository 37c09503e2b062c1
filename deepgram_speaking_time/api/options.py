"""Immutable request options and the fluent builder that refines them.

WHY: The Deepgram response envelope changes shape depending on which
features were requested. Asking for alternatives keeps the per-channel
alternatives array; asking for search keeps the per-channel search hits.
The options that built a request are therefore also the key to decoding
its response, so they must be an exact, unchangeable record.

HOW: RequestOptions is a frozen dataclass. Each builder method returns a
new instance via dataclasses.replace with exactly one field changed. Two
flags (alternatives_explicitly_set, search_explicitly_set) carry the
response-shape information to the decoder.

RULES:
- No method ever mutates an existing RequestOptions
- set_alternatives_count clamps to max(round(n), 1) and always marks
  alternatives_explicitly_set, even when the effective count is 1
- add_keywords / add_search_terms append, they never replace
- Nothing here validates or rejects input; odd values are normalized
- Redaction flags, keywords, and search terms freely coexist
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Iterable, Optional, Tuple, Union

from deepgram_speaking_time.config import DEEPGRAM_HOST

if TYPE_CHECKING:
    from deepgram_speaking_time.api.client import DeepgramTranscriber
    from deepgram_speaking_time.api.models import Credentials, TranscriptResult


class Punctuation(str, enum.Enum):
    PUNCTUATED = "punctuated"
    NON_PUNCTUATED = "non-punctuated"


class Diarization(str, enum.Enum):
    DIARIZED = "diarized"
    NON_DIARIZED = "non-diarized"


class Redaction(str, enum.Enum):
    """Sensitive-content classes the service can mask in transcripts."""

    NUMBERS = "numbers"
    SSN = "ssn"
    PCI = "pci"


@dataclass(frozen=True)
class Keyword:
    """A vocabulary hint, optionally weighted with a boost factor."""

    word: str
    boost: Optional[float] = None


KeywordInput = Union[str, Keyword, Tuple[str, Optional[float]]]


def _normalize_count(count: float) -> int:
    # Half-up rounding; NaN and infinities collapse to the minimum.
    if not math.isfinite(count):
        return 1
    return max(int(math.floor(count + 0.5)), 1)


def _to_keyword(value: KeywordInput) -> Keyword:
    if isinstance(value, Keyword):
        return value
    if isinstance(value, str):
        return Keyword(word=value)
    word, boost = value
    return Keyword(word=word, boost=boost)


@dataclass(frozen=True)
class RequestOptions:
    """All transcription feature toggles for one logical configuration.

    WHY: A single immutable value can be shared between concurrent
    requests and reused to decode callback deliveries later, without any
    risk of one caller changing what another caller asked for.

    HOW: Start from DEFAULT_OPTIONS (or RequestOptions()) and chain builder
    calls: DEFAULT_OPTIONS.diarize().punctuate().add_search_terms(["hi"]).

    RULES:
    - alternatives_count is always >= 1
    - redactions is a frozenset, keywords/search_terms are tuples
    - host is the bare API host name, no scheme
    """

    punctuation: Punctuation = Punctuation.NON_PUNCTUATED
    diarization: Diarization = Diarization.NON_DIARIZED
    alternatives_count: int = 1
    alternatives_explicitly_set: bool = False
    profanity_filter: bool = False
    redactions: FrozenSet[Redaction] = field(default_factory=frozenset)
    keywords: Tuple[Keyword, ...] = ()
    search_terms: Tuple[str, ...] = ()
    search_explicitly_set: bool = False
    callback_url: Optional[str] = None
    host: str = DEEPGRAM_HOST

    # ------------------------------------------------------------------
    # Feature toggles
    # ------------------------------------------------------------------

    def punctuate(self) -> RequestOptions:
        return replace(self, punctuation=Punctuation.PUNCTUATED)

    def diarize(self) -> RequestOptions:
        return replace(self, diarization=Diarization.DIARIZED)

    def set_alternatives_count(self, count: float) -> RequestOptions:
        """Request up to ``count`` alternative transcripts per channel.

        The count is rounded and clamped to at least 1. The explicit flag
        is set regardless, which keeps the alternatives array in decoded
        responses even for a count of 1.
        """
        return replace(
            self,
            alternatives_count=_normalize_count(count),
            alternatives_explicitly_set=True,
        )

    def filter_profanity(self) -> RequestOptions:
        return replace(self, profanity_filter=True)

    def redact_numbers(self) -> RequestOptions:
        return replace(self, redactions=self.redactions | {Redaction.NUMBERS})

    def redact_ssn(self) -> RequestOptions:
        return replace(self, redactions=self.redactions | {Redaction.SSN})

    def redact_pci(self) -> RequestOptions:
        return replace(self, redactions=self.redactions | {Redaction.PCI})

    def add_keywords(self, keywords: Iterable[KeywordInput]) -> RequestOptions:
        """Append vocabulary hints.

        Accepts plain words, Keyword values, or (word, boost) pairs.
        """
        added = tuple(_to_keyword(k) for k in keywords)
        return replace(self, keywords=self.keywords + added)

    def add_search_terms(self, terms: Iterable[str]) -> RequestOptions:
        return replace(
            self,
            search_terms=self.search_terms + tuple(terms),
            search_explicitly_set=True,
        )

    def with_callback_url(self, callback_url: Optional[str]) -> RequestOptions:
        return replace(self, callback_url=callback_url)

    def with_host(self, host: str) -> RequestOptions:
        return replace(self, host=host)

    # ------------------------------------------------------------------
    # Bridges to the client and decoder
    # ------------------------------------------------------------------

    def with_credentials(self, credentials: Credentials, **client_kwargs: Any) -> DeepgramTranscriber:
        """Bind these options to a key pair, ready to transcribe.

        Extra keyword arguments (timeout, transport) are passed through to
        the underlying DeepgramClient.
        """
        from deepgram_speaking_time.api.client import DeepgramTranscriber

        return DeepgramTranscriber(credentials, self, **client_kwargs)

    def decoder(self) -> Callable[[Union[str, bytes, Dict[str, Any]]], TranscriptResult]:
        """Return a one-argument decoder bound to these options.

        Callback receivers use this to decode delivered bodies with the
        same shape rules as the synchronous path.
        """
        from deepgram_speaking_time.api.decoder import decode

        def _decode(raw: Union[str, bytes, Dict[str, Any]]) -> TranscriptResult:
            return decode(self, raw)

        return _decode


DEFAULT_OPTIONS = RequestOptions()
"""Starting point for builder chains: nothing enabled, default host."""
