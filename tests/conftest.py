"""Shared test fixtures for the deepgram_speaking_time test suite.

WHY: Decoder, client, and server tests all need the same raw Deepgram
response so that channel-shape assertions line up across modules.

HOW: Pytest fixtures provide a two-channel, two-alternative response with
search hits and diarized, punctuated words, plus an error payload and
a callback acknowledgement.

RULES:
- Speaker ids in the sample are 0 and 1
- Each channel's first alternative is the best one
- Fixtures return fresh copies so tests can mutate them freely
"""

import copy
from typing import Any, Dict

import pytest

from deepgram_speaking_time.api.models import Credentials


def _word(text, start, end, speaker, confidence=0.95):
    return {
        "word": text.lower().strip(".,?"),
        "start": start,
        "end": end,
        "confidence": confidence,
        "speaker": speaker,
        "punctuated_word": text,
    }


RAW_RESPONSE: Dict[str, Any] = {
    "metadata": {
        "request_id": "8f1c2a9e-55b1-4d0f-9e2b-3a7c1d4e5f60",
        "transaction_key": "deprecated",
        "sha256": "5324da68ede209a16ac69a38e8cd29cee4d754434a041166cda3a1f5e0b24566",
        "created": "2021-03-02T10:15:00.000Z",
        "duration": 4.2,
        "channels": 2,
    },
    "results": {
        "channels": [
            {
                "search": [
                    {
                        "query": "hi",
                        "hits": [
                            {"confidence": 0.9, "start": 0.0, "end": 0.4, "snippet": "hi there"},
                        ],
                    }
                ],
                "alternatives": [
                    {
                        "transcript": "Hi there. Hello.",
                        "confidence": 0.97,
                        "words": [
                            _word("Hi", 0.0, 0.4, 0),
                            _word("there.", 0.5, 1.0, 0),
                            _word("Hello.", 2.0, 4.0, 1),
                        ],
                    },
                    {
                        "transcript": "High there. Hello.",
                        "confidence": 0.61,
                        "words": [
                            _word("High", 0.0, 0.4, 0, 0.5),
                            _word("there.", 0.5, 1.0, 0),
                            _word("Hello.", 2.0, 4.0, 1),
                        ],
                    },
                ],
            },
            {
                "search": [{"query": "hi", "hits": []}],
                "alternatives": [
                    {
                        "transcript": "Goodbye.",
                        "confidence": 0.93,
                        "words": [_word("Goodbye.", 0.2, 0.9, 0)],
                    },
                    {
                        "transcript": "Good buy.",
                        "confidence": 0.42,
                        "words": [
                            _word("Good", 0.2, 0.5, 0, 0.4),
                            _word("buy.", 0.5, 0.9, 0, 0.4),
                        ],
                    },
                ],
            },
        ]
    },
}

ERROR_RESPONSE: Dict[str, Any] = {
    "error": "Bad Request",
    "reason": "Could not determine the audio format",
}


@pytest.fixture
def raw_response():
    """Two channels x two alternatives, with search hits and speakers."""
    return copy.deepcopy(RAW_RESPONSE)


@pytest.fixture
def error_response():
    return copy.deepcopy(ERROR_RESPONSE)


@pytest.fixture
def credentials():
    return Credentials(api_key="test-key", api_secret="test-secret")
