"""Query-string construction for the Deepgram listen endpoint.

WHY: Every feature toggle travels as a query parameter. Keeping the
parameter order fixed makes requests deterministic, loggable, and easy
to assert on in tests, no matter in which order the builder was called.

HOW: build_query walks the option fields in one fixed order and emits
``name=value`` pairs. build_route prefixes the listen path and only adds
``?`` when at least one parameter is present.

RULES:
- Order: punctuate, diarize, alternatives, profanity_filter,
  redact (numbers, ssn, pci), keywords, search, callback
- alternatives is emitted only when the count is greater than 1
- Free-text values are encoded like JavaScript's encodeURIComponent
- Weighted keywords render as ``<word>:<boost>``, boost formatted as in JavaScript
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import List
from urllib.parse import quote

from deepgram_speaking_time.api.options import (
    Diarization,
    Keyword,
    Punctuation,
    Redaction,
    RequestOptions,
)
from deepgram_speaking_time.config import LISTEN_PATH

# Characters encodeURIComponent leaves untouched besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"

_REDACTION_ORDER = (Redaction.NUMBERS, Redaction.SSN, Redaction.PCI)


def encode_component(value: str) -> str:
    """Percent-encode a single query value."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _format_boost(boost: float) -> str:
    """Render a boost the way JavaScript prints a number.

    2.0 -> "2", 0.00001 -> "0.00001", 1e-07 -> "1e-7", nan -> "NaN".
    """
    boost = float(boost)
    if math.isnan(boost):
        return "NaN"
    if math.isinf(boost):
        return "Infinity" if boost > 0 else "-Infinity"
    if 1e-7 <= abs(boost) < 1e21 or boost == 0:
        if boost.is_integer():
            return str(int(boost))
        # Shortest round-trip digits, without an exponent
        return format(Decimal(repr(boost)), "f")
    mantissa, _, exponent = repr(boost).partition("e")
    return "{}e{}{}".format(mantissa, "-" if exponent.startswith("-") else "+", int(exponent[1:]))


def _keyword_param(keyword: Keyword) -> str:
    if keyword.boost is None:
        return "keywords={}".format(encode_component(keyword.word))
    return "keywords={}:{}".format(
        encode_component(keyword.word), _format_boost(keyword.boost)
    )


def build_query_params(options: RequestOptions) -> List[str]:
    """Return the ``name=value`` pairs for these options, in wire order."""
    params: List[str] = []

    if options.punctuation is Punctuation.PUNCTUATED:
        params.append("punctuate=true")
    if options.diarization is Diarization.DIARIZED:
        params.append("diarize=true")
    if options.alternatives_count > 1:
        params.append("alternatives={}".format(options.alternatives_count))
    if options.profanity_filter:
        params.append("profanity_filter=true")

    for redaction in _REDACTION_ORDER:
        if redaction in options.redactions:
            params.append("redact={}".format(redaction.value))

    params.extend(_keyword_param(k) for k in options.keywords)
    params.extend(
        "search={}".format(encode_component(term)) for term in options.search_terms
    )

    if options.callback_url is not None:
        params.append("callback={}".format(encode_component(options.callback_url)))

    return params


def build_query(options: RequestOptions) -> str:
    return "&".join(build_query_params(options))


def build_route(options: RequestOptions) -> str:
    """Return the request path plus query string for these options.

    No parameters yields the bare path, without a trailing ``?``.
    """
    query = build_query(options)
    if not query:
        return LISTEN_PATH
    return "{}?{}".format(LISTEN_PATH, query)
