from conftest import SCENARIO_TRANSCRIPT, timings_for
from speakbetter.services.fillers import FillerDetector, detect, detect_pauses
from speakbetter.services.normalizer import NormalizedToken, normalize


def _tokens(text):
    return normalize(text, timings_for(text))


def test_scenario_fillers_with_timestamps():
    found = detect(_tokens(SCENARIO_TRANSCRIPT))
    assert [(f.word, f.timestamp) for f in found] == [("um", 0.0), ("uh", 4.0)]


def test_case_insensitive():
    found = detect(_tokens("UM, Like, whatever"))
    assert [f.word for f in found] == ["um", "like"]


def test_phrase_uses_first_token_timestamp():
    found = detect(_tokens("it is you know fine"))
    assert [(f.word, f.timestamp) for f in found] == [("you know", 2.0)]


def test_longer_phrase_wins_at_same_start():
    detector = FillerDetector(["you", "you know"])
    found = detector.detect(_tokens("you know what you said"))
    assert [f.word for f in found] == ["you know", "you"]


def test_matched_tokens_are_consumed():
    detector = FillerDetector(["i mean", "mean it"])
    found = detector.detect(_tokens("i mean it"))
    assert [f.word for f in found] == ["i mean"]


def test_terms_are_stripped_like_tokens():
    detector = FillerDetector(["you know,", "Um!"])
    found = detector.detect(_tokens("um, you know, it works"))
    assert [f.word for f in found] == ["um", "you know"]


def test_empty_input():
    assert detect([]) == []


def test_untimed_tokens_get_zero_timestamp():
    found = detect([NormalizedToken("um", "Um")])
    assert found[0].timestamp == 0.0


def test_repetitions_only_when_enabled():
    tokens = _tokens("I I think so")
    assert FillerDetector(["um"]).detect(tokens) == []
    found = FillerDetector(["um"], detect_repetitions=True).detect(tokens)
    assert [(f.word, f.timestamp) for f in found] == [("i", 1.0)]


def test_repeated_filler_counts_once_per_occurrence():
    found = FillerDetector(["um"], detect_repetitions=True).detect(_tokens("um um yes"))
    assert [f.word for f in found] == ["um", "um"]


def test_long_pauses():
    tokens = [
        NormalizedToken("a", "a", 0.0, 0.5),
        NormalizedToken("b", "b", 0.6, 1.0),
        NormalizedToken("c", "c", 4.0, 4.5),
    ]
    pauses = detect_pauses(tokens, threshold=2.0)
    assert len(pauses) == 1
    assert pauses[0].start == 1.0 and pauses[0].end == 4.0 and pauses[0].duration == 3.0


def test_estimated_timings_have_no_pauses():
    tokens = normalize("a b c", None, duration_seconds=30)
    assert detect_pauses(tokens, threshold=2.0) == []
