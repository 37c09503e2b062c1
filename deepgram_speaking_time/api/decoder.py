"""Reshape raw Deepgram responses into the shape implied by the request.

WHY: The raw JSON always carries per-channel ``alternatives`` and, when
searched, ``search`` arrays. Most callers only want the best transcript,
but callers that asked for alternatives or search need those arrays kept.
Which shape applies cannot be guessed from the JSON, so decoding needs
the RequestOptions that built the request.

HOW: Parse the body (text, bytes, or an already-parsed dict), short-circuit
on the service's error indicator, then convert each raw channel into one
of four channel dataclasses based on two flags:

  alternatives_explicitly_set  search_explicitly_set  → shape
  True                         False                  → AlternativesChannel
  True                         True                   → AlternativesSearchChannel
  False                        False                  → Channel
  False                        True                   → SearchChannel

RULES:
- Error payloads are passed through uninterpreted as the reason
- Invalid JSON or missing fields yield ErrorSource.DECODE, never defaults
- Alternatives are kept in service order; collapsing takes alternatives[0]
- decode() never raises
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple, Union

from deepgram_speaking_time.api.models import (
    Alternative,
    AlternativesChannel,
    AlternativesSearchChannel,
    AnyChannel,
    CallbackAccepted,
    Channel,
    ErrorSource,
    Metadata,
    SearchChannel,
    SearchResult,
    SubmissionResult,
    TranscriptError,
    TranscriptResult,
    TranscriptSuccess,
)
from deepgram_speaking_time.api.options import RequestOptions

RawBody = Union[str, bytes, bytearray, Dict[str, Any]]

# Keys Deepgram uses to signal a failed request
_ERROR_KEYS = ("error", "err_code", "err_msg")


class _MalformedBody(ValueError):
    pass


def _parse(raw: RawBody) -> Tuple[Dict[str, Any], str]:
    """Return the parsed JSON object and its text form."""
    if isinstance(raw, dict):
        return raw, json.dumps(raw)

    if isinstance(raw, (bytes, bytearray)):
        try:
            text = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _MalformedBody("Response body is not valid UTF-8: {}".format(exc))
    else:
        text = raw

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise _MalformedBody("Response body is not valid JSON: {}".format(exc))

    if not isinstance(data, dict):
        raise _MalformedBody(
            "Expected a JSON object, got {}".format(type(data).__name__)
        )
    return data, text


def _is_error(data: Dict[str, Any]) -> bool:
    return any(data.get(key) for key in _ERROR_KEYS)


def _decode_channel(options: RequestOptions, raw_channel: Dict[str, Any]) -> AnyChannel:
    alternatives = [Alternative.from_dict(a) for a in raw_channel["alternatives"]]

    search: List[SearchResult] = []
    if options.search_explicitly_set:
        search = [SearchResult.from_dict(s) for s in raw_channel.get("search", [])]

    if options.alternatives_explicitly_set:
        if options.search_explicitly_set:
            return AlternativesSearchChannel(alternatives=alternatives, search=search)
        return AlternativesChannel(alternatives=alternatives)

    if not alternatives:
        raise _MalformedBody("Channel has no alternatives to collapse")
    best = alternatives[0]
    if options.search_explicitly_set:
        return SearchChannel(
            transcript=best.transcript,
            confidence=best.confidence,
            words=best.words,
            search=search,
        )
    return Channel(
        transcript=best.transcript,
        confidence=best.confidence,
        words=best.words,
    )


def decode(options: RequestOptions, raw: RawBody) -> TranscriptResult:
    """Decode a transcript response body using the options that requested it.

    Args:
        options: The RequestOptions the request was built from.
        raw: Response body as text, bytes, or a parsed JSON dict.

    Returns:
        TranscriptSuccess with channels in the shape the options imply, or
        TranscriptError (REMOTE for service-reported errors, DECODE for
        malformed bodies).
    """
    try:
        data, text = _parse(raw)
    except _MalformedBody as exc:
        return TranscriptError(reason=str(exc), source=ErrorSource.DECODE)

    if _is_error(data):
        return TranscriptError(reason=text, source=ErrorSource.REMOTE)

    try:
        metadata = Metadata.from_dict(data["metadata"])
        channels = [
            _decode_channel(options, c) for c in data["results"]["channels"]
        ]
    except _MalformedBody as exc:
        return TranscriptError(reason=str(exc), source=ErrorSource.DECODE)
    except (AttributeError, KeyError, OverflowError, TypeError, ValueError) as exc:
        # Wrong JSON types surface as AttributeError, infinite ints as OverflowError
        return TranscriptError(
            reason="Malformed transcript response ({}: {})".format(
                type(exc).__name__, exc
            ),
            source=ErrorSource.DECODE,
        )

    return TranscriptSuccess(metadata=metadata, channels=channels)


def decode_submission(raw: RawBody) -> SubmissionResult:
    """Decode the acknowledgement of a callback-mode submission.

    The service answers a callback request with only ``{"request_id": ...}``;
    the transcript arrives later at the callback URL.
    """
    try:
        data, text = _parse(raw)
    except _MalformedBody as exc:
        return TranscriptError(reason=str(exc), source=ErrorSource.DECODE)

    if _is_error(data):
        return TranscriptError(reason=text, source=ErrorSource.REMOTE)

    request_id = data.get("request_id")
    if not isinstance(request_id, str) or not request_id:
        return TranscriptError(
            reason="Submission acknowledgement has no request_id: {}".format(text),
            source=ErrorSource.DECODE,
        )
    return CallbackAccepted(request_id=request_id)
