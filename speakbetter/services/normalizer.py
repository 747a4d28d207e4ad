"""Transcript normalization: tokenize the raw transcription text and attach
the per-word timing windows reported by the transcription service.
"""
import logging
import string
import warnings
from typing import List, NamedTuple, Optional

from ..errors import AlignmentWarning

logger = logging.getLogger(__name__)

_STRIP_CHARS = string.punctuation + "“”‘’…–—"


class NormalizedToken(NamedTuple):
    word: str                   # lower-cased, surrounding punctuation removed
    text: str                   # as it appeared in the transcript
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    estimated: bool = False     # timing spread over the duration, not measured

    @property
    def has_timing(self):
        return self.start_time is not None


def tokenize(transcript):
    """Split on whitespace, dropping tokens that are only punctuation."""
    out = []
    for raw in (transcript or "").split():
        word = raw.strip(_STRIP_CHARS).lower()
        if word:
            out.append((word, raw))
    return out


def normalize_term(term):
    """Lower-case a filler term and strip punctuation the way ``tokenize`` does."""
    return " ".join(word for word, _ in tokenize(str(term)))


def normalize(transcript, word_timings=None, tolerance=2, duration_seconds=None) -> List[NormalizedToken]:
    """Align transcript words with ``word_timings`` by position.

    With timings the result is truncated to ``min(len(words), len(timings))``;
    a count difference above ``tolerance`` is reported as an
    ``AlignmentWarning`` but never fails. Without timings every word is kept,
    with windows spread evenly over ``duration_seconds`` when it is known.
    """
    words = tokenize(transcript)
    timings = list(word_timings or [])

    if timings:
        diff = abs(len(words) - len(timings))
        if diff > tolerance:
            msg = (f"transcript has {len(words)} words but {len(timings)} timings "
                   f"(difference {diff} exceeds tolerance {tolerance})")
            logger.warning(msg)
            warnings.warn(msg, AlignmentWarning, stacklevel=2)
        return [
            NormalizedToken(word, text, float(t.start_time), float(t.end_time))
            for (word, text), t in zip(words, timings)
        ]

    if duration_seconds and duration_seconds > 0 and words:
        step = float(duration_seconds) / len(words)
        return [
            NormalizedToken(word, text, i * step, (i + 1) * step, True)
            for i, (word, text) in enumerate(words)
        ]

    return [NormalizedToken(word, text) for word, text in words]
