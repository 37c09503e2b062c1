"""Per-speaker speaking time from a diarized word sequence.

WHY: Conversation analytics (who dominated a call, talk-time balance)
need the cumulative time each speaker held the floor. Deepgram tags each
word with a speaker id but does not summarize turns.

HOW: Walk the words in order, remembering the word where the current
speaker's turn began. When the speaker changes, the previous speaker is
credited with the time from their turn start to the new speaker's first
word start. The final turn runs to the last word's end.

RULES:
- A turn ends where the next speaker's first word starts, so silence
  between turns counts for the previous speaker. Word ``end`` values are
  only used for the final turn.
- Output is ordered by ascending speaker id, one entry per observed
  speaker (ids need not be contiguous)
- Empty input gives empty output; there is no error path
- Words without a speaker tag (non-diarized) are ignored
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

from deepgram_speaking_time.api.models import Word


@dataclass(frozen=True)
class SpeakerDuration:
    speaker: int
    seconds: float


def speaking_time_by_speaker(words: Iterable[Word]) -> Dict[int, float]:
    """Return cumulative speaking seconds keyed by speaker id, sorted by id."""
    tagged = [w for w in words if w.speaker is not None]
    if not tagged:
        return {}

    totals: Dict[int, float] = {}
    turn_start = tagged[0]

    for word in tagged[1:]:
        if word.speaker != turn_start.speaker:
            totals[turn_start.speaker] = (
                totals.get(turn_start.speaker, 0.0) + word.start - turn_start.start
            )
            turn_start = word

    # Final turn closes on the last word's end
    totals[turn_start.speaker] = (
        totals.get(turn_start.speaker, 0.0) + tagged[-1].end - turn_start.start
    )

    return {speaker: totals[speaker] for speaker in sorted(totals)}


def speaking_time_table(words: Iterable[Word]) -> List[SpeakerDuration]:
    return [
        SpeakerDuration(speaker=speaker, seconds=seconds)
        for speaker, seconds in speaking_time_by_speaker(words).items()
    ]


def aggregate_speaking_time(words: Iterable[Word]) -> List[float]:
    """Return speaking seconds per speaker, ordered by ascending speaker id.

    The list is indexed by rank, not by raw speaker id: words from
    speakers {0, 2} give a two-element list.

    Example:
        >>> aggregate_speaking_time([
        ...     Word("hi", 0.0, 1.0, 0.9, speaker=0),
        ...     Word("there", 1.0, 2.0, 0.9, speaker=0),
        ...     Word("hello", 2.0, 4.0, 0.9, speaker=1),
        ... ])
        [2.0, 2.0]
    """
    return list(speaking_time_by_speaker(words).values())
