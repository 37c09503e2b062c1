"""Async HTTP client for the Deepgram pre-recorded transcription API.

WHY: Callers (the callback server, scripts, tests) need one awaitable call
that sends audio, waits for the transcript, and hands back a result value
whose shape matches the requested features. HTTP details, auth encoding,
and failure handling stay in this module.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. DeepgramClient is an
async context manager — enter it to get a client, exit to close the
connection pool. transcribe() builds the route from RequestOptions, POSTs
the payload, buffers the whole streamed body, and feeds it to the decoder.
transcribe_with_callback() returns as soon as the submission is
acknowledged.

RULES:
- Always use the async context manager (async with DeepgramClient(...) as client:)
- Authorization is "Basic " + base64(api_key:api_secret)
- Content-Type is application/json for URL sources, the mimetype for buffers
- Transport failures resolve to TranscriptError(source=TRANSPORT), never raise
- No timeout unless one is configured; a configured timeout is a transport failure
- The full body is buffered before decoding (no incremental parsing)
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional

import httpx

from deepgram_speaking_time.api.decoder import decode, decode_submission
from deepgram_speaking_time.api.models import (
    AudioSource,
    BufferSource,
    Credentials,
    ErrorSource,
    SubmissionResult,
    TranscriptError,
    TranscriptResult,
    UrlSource,
)
from deepgram_speaking_time.api.options import RequestOptions
from deepgram_speaking_time.api.routes import build_route
from deepgram_speaking_time.config import DEEPGRAM_TIMEOUT_S, SUPPORTED_MIMETYPES

logger = logging.getLogger(__name__)


def build_auth_header(credentials: Credentials) -> str:
    """Return the Basic Authorization header value for a key pair."""
    raw = "{}:{}".format(credentials.api_key, credentials.api_secret)
    return "Basic " + base64.b64encode(raw.encode("utf-8")).decode("ascii")


def build_url(options: RequestOptions) -> str:
    return "https://{}{}".format(options.host, build_route(options))


def _transport_error(exc: Exception) -> TranscriptError:
    reason = "{}: {}".format(type(exc).__name__, exc) if str(exc) else type(exc).__name__
    return TranscriptError(reason=reason, source=ErrorSource.TRANSPORT)


class DeepgramClient:
    """Async client for the Deepgram /v2/listen endpoint.

    WHY: Provides a typed interface over one HTTP exchange per call, with
    the response shape decided by the RequestOptions used.

    HOW: Wraps httpx.AsyncClient with a fixed Basic auth header. Use as an
    async context manager to ensure the connection pool is closed.

    RULES:
    - Use as: async with DeepgramClient(credentials) as client: ...
    - credentials default to Credentials.from_env()
    - timeout defaults to DEEPGRAM_TIMEOUT_S (None = wait indefinitely)
    - transport is an optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        credentials: Optional[Credentials] = None,
        timeout: Optional[float] = DEEPGRAM_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._credentials = credentials or Credentials.from_env()
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> DeepgramClient:
        self._client = httpx.AsyncClient(
            headers={"Authorization": build_auth_header(self._credentials)},
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "DeepgramClient must be used as an async context manager: "
                "async with DeepgramClient(credentials) as client: ..."
            )
        return self._client

    async def _post(self, options: RequestOptions, source: AudioSource) -> httpx.Response:
        """POST the audio and buffer the complete response body.

        Raises httpx.HTTPError / httpx.StreamError on transport failures;
        callers convert those to TranscriptError.
        """
        client = self._ensure_client()
        url = build_url(options)
        logger.info(
            "Submitting %s source to %s", source.kind, url.split("?", 1)[0]
        )
        logger.debug("Request route: %s", build_route(options))
        if isinstance(source, BufferSource) and source.mimetype.lower() not in SUPPORTED_MIMETYPES:
            # Sent anyway; the service decides what it can decode.
            logger.warning("Uncommon audio content type %r", source.mimetype)

        request = client.build_request(
            "POST",
            url,
            content=source.payload(),
            headers={"Content-Type": source.content_type},
        )
        response = await client.send(request, stream=True)
        try:
            await response.aread()
        finally:
            await response.aclose()
        return response

    @staticmethod
    def _remote_status_error(response: httpx.Response) -> TranscriptError:
        return TranscriptError(
            reason="HTTP {}: {}".format(response.status_code, response.text),
            source=ErrorSource.REMOTE,
        )

    async def transcribe(
        self,
        options: RequestOptions,
        source: AudioSource,
    ) -> TranscriptResult:
        """Transcribe audio and wait for the full transcript.

        Args:
            options: Feature toggles; also decide the decoded channel shape.
            source: UrlSource or BufferSource.

        Returns:
            TranscriptSuccess, or TranscriptError for transport failures,
            service-reported errors, and malformed bodies.
        """
        try:
            response = await self._post(options, source)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.warning("Transport failure talking to %s: %s", options.host, exc)
            return _transport_error(exc)

        result = decode(options, response.content)
        if not result.ok:
            logger.warning(
                "Transcription failed (%s, HTTP %s)",
                result.source.value,
                response.status_code,
            )
            return result
        if not response.is_success:
            return self._remote_status_error(response)

        logger.info("Transcription %s complete", result.metadata.request_id)
        return result

    async def transcribe_with_callback(
        self,
        options: RequestOptions,
        source: AudioSource,
        callback_url: str,
    ) -> SubmissionResult:
        """Submit audio for transcription with delivery to a callback URL.

        Resolves as soon as the service acknowledges the submission. The
        transcript is POSTed later to ``callback_url``; decode it with
        ``decode(options.with_callback_url(callback_url), body)`` or the
        options' ``decoder()``.
        """
        options = options.with_callback_url(callback_url)
        try:
            response = await self._post(options, source)
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.warning("Transport failure talking to %s: %s", options.host, exc)
            return _transport_error(exc)

        result = decode_submission(response.content)
        if not result.ok:
            logger.warning(
                "Callback submission failed (%s, HTTP %s)",
                result.source.value,
                response.status_code,
            )
            return result
        if not response.is_success:
            return self._remote_status_error(response)

        logger.info("Callback submission accepted as %s", result.request_id)
        return result


# ---------------------------------------------------------------------------
# One-shot helpers
# ---------------------------------------------------------------------------


async def transcribe(
    credentials: Credentials,
    options: RequestOptions,
    source: AudioSource,
    **client_kwargs: Any,
) -> TranscriptResult:
    """Open a client, transcribe once, and close it."""
    async with DeepgramClient(credentials, **client_kwargs) as client:
        return await client.transcribe(options, source)


async def transcribe_with_callback(
    credentials: Credentials,
    options: RequestOptions,
    source: AudioSource,
    callback_url: str,
    **client_kwargs: Any,
) -> SubmissionResult:
    async with DeepgramClient(credentials, **client_kwargs) as client:
        return await client.transcribe_with_callback(options, source, callback_url)


class DeepgramTranscriber:
    """Options bound to credentials, returned by RequestOptions.with_credentials.

    WHY: Scripts typically build one configuration and transcribe several
    sources with it: ``options.with_credentials(creds).transcribe_url(url)``.

    RULES:
    - Each call opens and closes its own DeepgramClient
    - The bound options are never modified
    """

    def __init__(
        self,
        credentials: Credentials,
        options: RequestOptions,
        **client_kwargs: Any,
    ) -> None:
        self.credentials = credentials
        self.options = options
        self._client_kwargs = client_kwargs

    async def transcribe_url(self, url: str) -> TranscriptResult:
        return await transcribe(
            self.credentials, self.options, UrlSource(url), **self._client_kwargs
        )

    async def transcribe_buffer(self, data: bytes, mimetype: str) -> TranscriptResult:
        return await transcribe(
            self.credentials,
            self.options,
            BufferSource(data=data, mimetype=mimetype),
            **self._client_kwargs,
        )

    async def transcribe_url_with_callback(
        self, audio_url: str, callback_url: str
    ) -> SubmissionResult:
        return await transcribe_with_callback(
            self.credentials,
            self.options,
            UrlSource(audio_url),
            callback_url,
            **self._client_kwargs,
        )
