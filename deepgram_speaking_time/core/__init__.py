"""Analytics computed from decoded transcripts.

WHY: Diarized transcripts are most useful summarized — how long each
speaker talked. This package holds those pure computations, kept apart
from HTTP and decoding so they can be tested with plain word lists.

RULES:
- Functions here are pure: no I/O, no logging of transcript content
- Input words must be in non-decreasing start order
"""
