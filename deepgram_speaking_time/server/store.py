"""In-memory submission store correlating callback deliveries with requests.

WHY: In callback mode the submission and the transcript arrive in two
unrelated HTTP exchanges. The receiver must remember which RequestOptions
each request id was submitted with, so the delivered body can be decoded
with the same shape rules, and keep the outcome around for polling.

HOW: Three components work together:
  SubmissionStatus — enum of valid states
  Submission       — dataclass holding options, status, and the outcome
  SubmissionStore  — thread-safe dict-based store with TTL cleanup

RULES:
- All store mutations are protected by threading.Lock
- Request ids come from the service; the store never invents them
- Deliveries for unknown request ids are recorded too (submitted elsewhere)
- Recording a submission never resets a delivery that arrived first
- TTL is measured from completed_at; pending submissions never expire
- Default TTL is 1 hour (3600 seconds)
"""

from __future__ import annotations

import enum
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from deepgram_speaking_time.api.options import RequestOptions
from deepgram_speaking_time.core.speaking_time import SpeakerDuration

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Submission:
    """State for one callback-mode transcription request.

    RULES:
    - options: the RequestOptions used to submit (None if submitted elsewhere)
    - transcript: best transcript of the first channel, once completed
    - speaking_time: per-speaker durations of the first channel, once completed
    - error: reason string when status is FAILED
    """

    request_id: str
    status: SubmissionStatus
    created_at: float
    updated_at: float
    options: Optional[RequestOptions] = None
    audio_url: Optional[str] = None
    completed_at: Optional[float] = None
    error: Optional[str] = None
    transcript: Optional[str] = None
    duration: Optional[float] = None
    speaking_time: List[SpeakerDuration] = field(default_factory=list)


class SubmissionStore:
    """Thread-safe in-memory store of callback-mode submissions.

    WHY: FastAPI serves submissions, deliveries, and polls concurrently;
    a single locked store keeps their view of each request consistent.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        self._submissions: Dict[str, Submission] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds

    def record_submission(
        self,
        request_id: str,
        options: RequestOptions,
        audio_url: Optional[str] = None,
    ) -> Submission:
        """Remember the options a request was submitted with.

        The delivery can arrive before the submission is recorded; an
        existing entry keeps its status and outcome.
        """
        with self._lock:
            submission = self._upsert(request_id)
            submission.options = options
            submission.audio_url = audio_url
            submission.updated_at = time.time()

        logger.info("Recorded submission %s (%s)", request_id, submission.status.value)
        return submission

    def get(self, request_id: str) -> Optional[Submission]:
        """Return the submission for a request id, or None if unknown."""
        with self._lock:
            return self._submissions.get(request_id)

    def options_for(self, request_id: Optional[str]) -> Optional[RequestOptions]:
        if request_id is None:
            return None
        with self._lock:
            submission = self._submissions.get(request_id)
            return submission.options if submission else None

    def _upsert(self, request_id: str) -> Submission:
        # Caller holds the lock
        submission = self._submissions.get(request_id)
        if submission is None:
            now = time.time()
            submission = Submission(
                request_id=request_id,
                status=SubmissionStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self._submissions[request_id] = submission
        return submission

    def mark_completed(
        self,
        request_id: str,
        transcript: str,
        duration: float,
        speaking_time: List[SpeakerDuration],
    ) -> Submission:
        now = time.time()
        with self._lock:
            submission = self._upsert(request_id)
            submission.status = SubmissionStatus.COMPLETED
            submission.transcript = transcript
            submission.duration = duration
            submission.speaking_time = list(speaking_time)
            submission.error = None
            submission.updated_at = now
            submission.completed_at = now

        logger.info("Submission %s completed", request_id)
        return submission

    def mark_failed(self, request_id: str, error: str) -> Submission:
        now = time.time()
        with self._lock:
            submission = self._upsert(request_id)
            submission.status = SubmissionStatus.FAILED
            submission.error = error
            submission.updated_at = now
            submission.completed_at = now

        logger.info("Submission %s failed", request_id)
        return submission

    def clear(self) -> None:
        with self._lock:
            self._submissions.clear()

    def cleanup_expired(self) -> int:
        """Remove completed/failed submissions older than the TTL.

        Returns the number of removed submissions.
        """
        now = time.time()
        expired: List[str] = []

        with self._lock:
            for request_id, submission in list(self._submissions.items()):
                if submission.completed_at is None:
                    continue
                if now - submission.completed_at > self._ttl_seconds:
                    del self._submissions[request_id]
                    expired.append(request_id)

        for request_id in expired:
            logger.info("Expired submission %s", request_id)
        return len(expired)
