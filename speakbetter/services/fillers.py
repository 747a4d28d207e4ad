"""Disfluency detection over a normalized token stream."""
from ..schemas import FillerInstance, Pause
from .analysis_config import DEFAULT_FILLER_TERMS
from .normalizer import normalize_term


def _timestamp(token):
    return token.start_time if token.start_time is not None else 0.0


class FillerDetector:
    """Stateless matcher for a fixed set of filler terms.

    Multi-word phrases are matched with a window of the phrase's length;
    matched tokens are consumed, and at any start position the longest
    matching phrase wins.
    """

    def __init__(self, terms=DEFAULT_FILLER_TERMS, detect_repetitions=False):
        self.phrases = {}
        for term in terms:
            parts = tuple(normalize_term(term).split())
            if parts:
                self.phrases[parts] = " ".join(parts)
        self.lengths = sorted({len(p) for p in self.phrases}, reverse=True)
        self.detect_repetitions = detect_repetitions

    @classmethod
    def from_config(cls, config):
        return cls(config.filler_terms, detect_repetitions=config.detect_repetitions)

    def _match_at(self, tokens, i):
        for length in self.lengths:
            if i + length > len(tokens):
                continue
            key = tuple(t.word for t in tokens[i:i + length])
            if key in self.phrases:
                return key
        return None

    def detect(self, tokens):
        out = []
        prev_word = None
        i = 0
        while i < len(tokens):
            match = self._match_at(tokens, i)
            if match:
                out.append(FillerInstance(word=self.phrases[match], timestamp=_timestamp(tokens[i])))
                i += len(match)
                prev_word = None
                continue
            tok = tokens[i]
            if self.detect_repetitions and tok.word == prev_word:
                out.append(FillerInstance(word=tok.word, timestamp=_timestamp(tok)))
            prev_word = tok.word
            i += 1
        return out


def detect(tokens, terms=None, detect_repetitions=False):
    return FillerDetector(terms or DEFAULT_FILLER_TERMS, detect_repetitions).detect(tokens)


def detect_pauses(tokens, threshold=2.0):
    """Gaps of at least ``threshold`` seconds between consecutive measured words."""
    pauses = []
    prev = None
    for tok in tokens:
        if not tok.has_timing or tok.estimated:
            prev = None
            continue
        if prev is not None:
            gap = tok.start_time - prev.end_time
            if gap >= threshold:
                pauses.append(Pause(start=prev.end_time, end=tok.start_time, duration=round(gap, 3)))
        prev = tok
    return pauses
