"""Post-transcription segment shaping.

Providers tend to emit very short filler segments ("Uh", "So,") as their
own timed entries. These are folded into the following segment so each
entry carries a useful amount of speech.
"""

from __future__ import annotations

import dataclasses

from linguasync.core.models import TranscriptionSegment

MIN_WORDS = 4
MAX_FILLER_DURATION = 2.0  # seconds


def merge_short_segments(
    segments: list[TranscriptionSegment],
    min_words: int = MIN_WORDS,
    max_duration: float = MAX_FILLER_DURATION,
) -> list[TranscriptionSegment]:
    """Merge short filler segments into the segment that follows them.

    Single left-to-right pass. While the running segment has fewer than
    ``min_words`` words and lasts less than ``max_duration`` seconds, the
    next segment is absorbed: end time extended, text and translation
    joined with a space, and the next segment's idiomatic rewrite and
    explanation preferred when non-empty.

    The input list and its segments are left untouched; order is preserved.

    Args:
        segments: Time-ordered segments as returned by the provider.
        min_words: Word count below which a segment counts as filler.
        max_duration: Duration (seconds) below which a segment counts as filler.

    Returns:
        New list of merged segments.
    """
    if not segments:
        return []

    merged: list[TranscriptionSegment] = []
    current = segments[0]

    for nxt in segments[1:]:
        word_count = len(current.text.split())
        duration = current.end - current.start

        if word_count < min_words and duration < max_duration:
            current = dataclasses.replace(
                current,
                end=nxt.end,
                text=f"{current.text} {nxt.text}",
                translation=f"{current.translation} {nxt.translation}",
                idiomatic=nxt.idiomatic or current.idiomatic,
                idiom_explanation=nxt.idiom_explanation or current.idiom_explanation,
            )
        else:
            merged.append(current)
            current = nxt

    merged.append(current)
    return merged
