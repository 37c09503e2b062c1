"""Configuration constants, supported audio types, and .env loading.

WHY: Credentials, the API host, and server defaults live in one place so
they are easy to find and override. The API key pair must never be
hardcoded.

HOW: python-dotenv loads the .env file on import. Constants are plain
module-level values read from the environment with sensible defaults.
load_credentials() gives a clear error when the key pair is missing.

RULES:
- DG_KEY / DG_SECRET are loaded from .env via python-dotenv, never hardcoded
- DEEPGRAM_HOST defaults to the pre-recorded API host
- DEEPGRAM_TIMEOUT_S unset means no client-side timeout
- All defaults can be overridden via environment variables
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

DEEPGRAM_HOST = os.getenv("DEEPGRAM_HOST", "brain.deepgram.com")
LISTEN_PATH = "/v2/listen"


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


DEEPGRAM_TIMEOUT_S = _optional_float("DEEPGRAM_TIMEOUT_S")
"""Client-side deadline in seconds, or None for no timeout."""

# Feature defaults applied to callback deliveries with no recorded submission
CALLBACK_DIARIZE = os.getenv("CALLBACK_DIARIZE", "true").lower() == "true"
CALLBACK_PUNCTUATE = os.getenv("CALLBACK_PUNCTUATE", "true").lower() == "true"

# ---------------------------------------------------------------------------
# Supported audio MIME types for buffer uploads
# ---------------------------------------------------------------------------

SUPPORTED_MIMETYPES: set[str] = {
    "audio/wave", "audio/wav", "audio/x-wav", "audio/x-pn-wav",
    "audio/webm", "video/webm",
    "audio/ogg", "video/ogg", "application/ogg",
    "audio/mpeg", "audio/mp3", "audio/flac", "audio/mp4",
}
"""Content types accepted for raw audio uploads (lowercase)."""


def load_credentials() -> Tuple[str, str]:
    """Load the Deepgram API key and secret from the environment.

    WHY: Every request is authenticated with a Basic-auth key pair.
    Loading it from the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if either value is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("DG_KEY", "").strip()
    secret = os.getenv("DG_SECRET", "").strip()
    if not key or not secret:
        raise ValueError(
            "Deepgram credentials not configured. "
            "Add DG_KEY and DG_SECRET to the .env file."
        )
    return key, secret
