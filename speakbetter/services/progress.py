# speakbetter/services/progress.py
"""Progress across a user's completed sessions.

Both helpers return plain dicts so they can be stored or serialized as-is.
"""

METRIC_KEYS = ("words_per_minute", "filler_word_percentage", "clarity_score")


def _pct_change(current, previous):
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)


def compare_metrics(current, previous):
    """Compare two SpeechMetrics records.

    ``improvement`` weighs pace by 1 and fillers and clarity by 2; fewer
    fillers and a higher clarity score count as better.
    """
    out = {}
    for key in METRIC_KEYS:
        cur = getattr(current, key)
        prev = getattr(previous, key)
        out[key] = {"current": round(cur, 2), "previous": round(prev, 2), "change": _pct_change(cur, prev)}

    score = 1 if out["words_per_minute"]["change"] > 0 else -1
    score += 2 if out["filler_word_percentage"]["change"] < 0 else -2
    score += 2 if out["clarity_score"]["change"] > 0 else -2
    out["improvement"] = score > 0
    return out


def summarize_progress(analyses, recent=5):
    analyses = sorted(analyses, key=lambda a: a.timestamp)
    n = len(analyses)
    summary = {
        "total_sessions": n,
        "total_practice_minutes": round(sum(a.metrics.duration_seconds for a in analyses) / 60.0, 1),
        "averages": {k: 0.0 for k in METRIC_KEYS},
        "latest": None,
        "comparison": None,
        "recent_session_ids": [a.session_id for a in reversed(analyses[-recent:])],
    }
    if not n:
        return summary
    for k in METRIC_KEYS:
        summary["averages"][k] = round(sum(getattr(a.metrics, k) for a in analyses) / n, 2)
    summary["latest"] = {k: getattr(analyses[-1].metrics, k) for k in METRIC_KEYS}
    if n > 1:
        summary["comparison"] = compare_metrics(analyses[-1].metrics, analyses[-2].metrics)
    return summary
