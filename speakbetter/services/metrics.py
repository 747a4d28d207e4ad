"""Delivery metrics: pace, filler density and the clarity score."""
from ..errors import InvalidInputError
from ..schemas import SpeechMetrics
from .analysis_config import AnalysisConfig


def words_per_minute(total_words, duration_seconds):
    if not duration_seconds:
        return 0.0
    return total_words * 60 / duration_seconds


def pace_deviation(wpm, low, high):
    """Distance in WPM from the target band, 0 inside it."""
    if wpm < low:
        return low - wpm
    if wpm > high:
        return wpm - high
    return 0.0


def clarity_score(filler_word_percentage, wpm, config=None):
    """Composite delivery score in [0, 100].

    100 minus a filler penalty (``clarity_filler_weight`` points per filler
    percentage point, capped at ``clarity_filler_cap``) minus a pace penalty
    (``clarity_pace_weight`` points per WPM outside the target band, capped at
    ``clarity_pace_cap``). Both penalties are non-decreasing, so more fillers
    never raise the score and moving toward the band never lowers it.
    """
    config = config or AnalysisConfig()
    if filler_word_percentage < 0 or wpm < 0:
        raise InvalidInputError("filler percentage and pace must be non-negative")
    filler_penalty = min(config.clarity_filler_cap, config.clarity_filler_weight * filler_word_percentage)
    deviation = pace_deviation(wpm, config.target_wpm_min, config.target_wpm_max)
    pace_penalty = min(config.clarity_pace_cap, config.clarity_pace_weight * deviation)
    score = 100.0 - filler_penalty - pace_penalty
    return round(max(0.0, min(100.0, score)), 2)


def filler_counts(filler_instances):
    counts = {}
    for f in filler_instances:
        key = f.word.lower()
        counts[key] = counts.get(key, 0) + 1
    return counts


def aggregate(tokens, filler_instances, duration_seconds, config=None, total_words=None) -> SpeechMetrics:
    """Build the SpeechMetrics record for one recording.

    ``total_words`` defaults to the number of tokens. A zero duration gives
    0 WPM; a negative duration or word count raises InvalidInputError.
    """
    if duration_seconds is None or duration_seconds < 0:
        raise InvalidInputError(f"duration_seconds must be non-negative, got {duration_seconds!r}")
    if total_words is None:
        total_words = len(tokens)
    if total_words < 0:
        raise InvalidInputError(f"total_words must be non-negative, got {total_words!r}")

    counts = filler_counts(filler_instances)
    total_fillers = sum(counts.values())
    pct = total_fillers / total_words * 100 if total_words else 0.0
    wpm = words_per_minute(total_words, duration_seconds)

    return SpeechMetrics.parse({
        "words_per_minute": wpm,
        "total_words": total_words,
        "duration_seconds": duration_seconds,
        "filler_word_counts": counts,
        "total_filler_words": total_fillers,
        "filler_word_percentage": pct,
        "clarity_score": clarity_score(pct, wpm, config),
    })
