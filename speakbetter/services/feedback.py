"""Template feedback generated from speech metrics.

Selection is driven only by the threshold tables below, so the same
metrics (and goals) always produce the same text. This is the fallback
path when no generative feedback service is configured.
"""
from ..schemas import FeedbackContent

THRESHOLDS = {
    "words_per_minute": {"slow": 110, "fast": 170},
    "filler_word_percentage": {"low": 2, "medium": 5, "high": 8},
    "clarity_score": {"low": 60, "medium": 75, "high": 90},
    "total_words": {"short": 30, "substantial": 200},
}

GOALS = ("pace", "fillers", "clarity", "confidence")

SUGGESTIONS = {
    "fillers": ("To reduce filler words, replace them with a brief, silent pause. "
                "Take a breath and organize the next thought before you speak."),
    "faster": ("To pick up your pace, practice with a timer: cover a fixed amount of "
               "content in a set time and shorten the limit a little each session."),
    "slower": ("To slow down, add deliberate pauses between key points and focus on "
               "articulating each word. A breath before an important point helps."),
    "clarity": ("To improve clarity, over-articulate during practice, especially word "
                "endings, then record yourself and listen for words that blur together."),
    "confidence": ("To build confidence, stand tall for a minute before you start, keep "
                   "your pace deliberate and let strategic pauses do some of the work."),
    "default": ("For your next session, vary your vocal tone to emphasize key points, "
                "and pick two or three specific things to improve from this recording."),
}

GOAL_ENCOURAGEMENT = {
    "pace": "Your focus on pace is paying off; consistent practice will settle your rhythm.",
    "fillers": "Noticing your filler words is the first step to dropping them.",
    "clarity": "Working on clarity makes every idea you share land harder.",
    "confidence": "Confidence grows with repetition, and every session counts.",
}


def common_fillers(filler_instances, limit=3):
    """Most frequent filler terms, ties broken by first appearance."""
    counts = {}
    for f in filler_instances or []:
        counts[f.word.lower()] = counts.get(f.word.lower(), 0) + 1
    order = list(counts)
    ranked = sorted(order, key=lambda w: (-counts[w], order.index(w)))
    return ranked[:limit]


def synthesize(metrics, filler_instances=None, goals=None, thresholds=THRESHOLDS) -> FeedbackContent:
    goals = {g for g in (goals or []) if g in GOALS}
    wpm_t = thresholds["words_per_minute"]
    fill_t = thresholds["filler_word_percentage"]
    clar_t = thresholds["clarity_score"]
    words_t = thresholds["total_words"]

    wpm = metrics.words_per_minute
    fillers = metrics.filler_word_percentage
    clarity = metrics.clarity_score

    strengths, issues = [], []
    too_slow = wpm < wpm_t["slow"]
    too_fast = wpm > wpm_t["fast"]
    if too_slow:
        issues.append("speaking on the slower side")
    elif too_fast:
        issues.append("speaking quite fast")
    else:
        strengths.append("speaking at a comfortable pace")

    if fillers > fill_t["high"]:
        issues.append("using a high number of filler words")
    elif fillers > fill_t["medium"]:
        issues.append("using some filler words")
    else:
        strengths.append("keeping filler words to a minimum")

    if clarity < clar_t["low"]:
        issues.append("losing some clarity")
    elif clarity > clar_t["high"]:
        strengths.append("speaking with excellent clarity")
    else:
        strengths.append("speaking with good clarity")

    if metrics.total_words < words_t["short"]:
        issues.append("giving a fairly short sample")
    elif metrics.total_words > words_t["substantial"]:
        strengths.append("giving a substantial speech sample")

    # positive
    if strengths:
        positive = f"You're {' and '.join(strengths[:2])}."
        if len(strengths) > 2:
            positive += f" You're also {strengths[2]}."
        if not too_slow and not too_fast:
            positive += (f" Your pace of {round(wpm)} words per minute is easy for "
                         "listeners to follow.")
    else:
        positive = "You've taken an important step by practicing out loud."

    # improvement
    if issues:
        improvement = f"I noticed you're {issues[0]}."
        if len(issues) > 1:
            improvement += f" You're also {issues[1]}."
        if fillers > fill_t["medium"]:
            common = common_fillers(filler_instances)
            if common:
                improvement += " The fillers you used most were " + ", ".join(f'"{w}"' for w in common) + "."
        if too_slow or too_fast:
            improvement += (f" Your pace was {round(wpm)} words per minute; "
                            f"aim for {wpm_t['slow']}-{wpm_t['fast']}.")
    else:
        improvement = "There were no significant issues in your delivery."

    # suggestion: user goals first, then the weakest metric
    if "fillers" in goals and fillers > fill_t["low"]:
        suggestion = SUGGESTIONS["fillers"]
    elif "pace" in goals and (too_slow or too_fast):
        suggestion = SUGGESTIONS["faster" if too_slow else "slower"]
    elif "clarity" in goals and clarity < clar_t["high"]:
        suggestion = SUGGESTIONS["clarity"]
    elif "confidence" in goals:
        suggestion = SUGGESTIONS["confidence"]
    elif fillers > fill_t["medium"]:
        suggestion = SUGGESTIONS["fillers"]
    elif too_slow:
        suggestion = SUGGESTIONS["faster"]
    elif too_fast:
        suggestion = SUGGESTIONS["slower"]
    elif clarity < clar_t["medium"]:
        suggestion = SUGGESTIONS["clarity"]
    else:
        suggestion = SUGGESTIONS["default"]

    parts = ["Keep practicing regularly and you'll keep improving."]
    parts.extend(GOAL_ENCOURAGEMENT[g] for g in GOALS if g in goals)
    parts.append("Every practice session builds your skills and your confidence!")
    encouragement = " ".join(parts)

    return FeedbackContent(positive=positive, improvement=improvement,
                           suggestion=suggestion, encouragement=encouragement)
