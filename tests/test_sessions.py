import threading
from datetime import datetime, timedelta, timezone

import pytest

from speakbetter.errors import (AnalysisError, InvalidInputError, NotFoundError,
                                PermissionDeniedError, SessionNotFoundError)
from speakbetter.schemas import Session, SessionStatus
from speakbetter.services.pipeline import AnalysisOutcome, analyze
from speakbetter.services.sessions import SessionManager
from speakbetter.services.store import ANALYSES, FEEDBACK, SESSIONS, MemoryDocumentStore


class SessionSaveFailsOnce(MemoryDocumentStore):
    """Fails the first session write that follows a stored analysis."""

    def __init__(self):
        super().__init__()
        self.failed = False

    def save_document(self, collection, record):
        if (collection == SESSIONS and not self.failed
                and self.query_documents(ANALYSES, session_id=record.id)):
            self.failed = True
            raise RuntimeError("session write lost")
        return super().save_document(collection, record)


def test_create_session_starts_processing(manager, store):
    s = manager.create_session("u1", "guided", duration_seconds=30, recording_url="https://x/rec.webm")
    assert s.status == SessionStatus.PROCESSING
    assert not s.has_analysis and not s.has_feedback
    assert store.fetch_document(SESSIONS, s.id) == s
    assert s.to_document()["recordingUrl"] == "https://x/rec.webm"


@pytest.mark.parametrize("kwargs", [
    {"duration_seconds": 0},
    {"duration_seconds": -3},
    {"duration_seconds": 10, "session_type": "lecture"},
])
def test_create_session_validates(manager, kwargs):
    with pytest.raises(InvalidInputError):
        manager.create_session("u1", **kwargs)


def test_successful_analysis_completes_session(manager, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    done = manager.analyze_session(s.id, scenario_result)
    assert done.status == SessionStatus.COMPLETED
    assert done.has_analysis and done.has_feedback
    analysis = manager.get_analysis(s.id)
    assert analysis.metrics.total_words == 8
    assert analysis.metrics.filler_word_counts == {"um": 1, "uh": 1}
    feedback = manager.get_feedback(s.id)
    assert feedback.analysis_id == analysis.id
    assert feedback.viewed_at is None


def test_recording_same_result_twice_is_a_no_op(manager, store, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    outcome = analyze(s, scenario_result)
    first = manager.record_analysis_result(s.id, outcome)
    second = manager.record_analysis_result(s.id, outcome)
    assert first == second
    assert store.fetch_document(SESSIONS, s.id) == first
    assert len(store.query_documents(ANALYSES, session_id=s.id)) == 1


def test_failed_session_write_rolls_back_records(scenario_result):
    store = SessionSaveFailsOnce()
    manager = SessionManager(store)
    s = manager.create_session("u1", duration_seconds=8)
    outcome = analyze(s, scenario_result)
    with pytest.raises(RuntimeError):
        manager.record_analysis_result(s.id, outcome)
    assert manager.get_session(s.id).status == SessionStatus.PROCESSING
    assert store.query_documents(ANALYSES, session_id=s.id) == []
    assert store.query_documents(FEEDBACK, session_id=s.id) == []

    retried = manager.record_analysis_result(s.id, outcome)
    assert retried.status == SessionStatus.COMPLETED
    assert retried.has_analysis and retried.has_feedback
    assert len(store.query_documents(ANALYSES, session_id=s.id)) == 1


def test_error_after_failed_session_write_leaves_no_records(scenario_result):
    store = SessionSaveFailsOnce()
    manager = SessionManager(store)
    s = manager.create_session("u1", duration_seconds=8)
    with pytest.raises(RuntimeError):
        manager.record_analysis_result(s.id, analyze(s, scenario_result))
    failed = manager.record_analysis_result(s.id, AnalysisError("worker crashed"))
    assert failed.status == SessionStatus.ERROR
    assert store.query_documents(ANALYSES, session_id=s.id) == []
    assert store.query_documents(FEEDBACK, session_id=s.id) == []


def test_error_clears_leftover_records(manager, store, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    outcome = analyze(s, scenario_result)
    store.save_document(ANALYSES, outcome.analysis)
    store.save_document(FEEDBACK, outcome.feedback)
    manager.record_analysis_result(s.id, AnalysisError("boom"))
    assert manager.get_analysis(s.id) is None
    assert manager.get_feedback(s.id) is None


def test_stored_records_complete_session_on_redelivery(manager, store, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    earlier = analyze(s, scenario_result)
    store.save_document(ANALYSES, earlier.analysis)
    store.save_document(FEEDBACK, earlier.feedback)
    done = manager.record_analysis_result(s.id, analyze(s, scenario_result))
    assert done.status == SessionStatus.COMPLETED
    assert done.has_analysis and done.has_feedback
    assert manager.get_analysis(s.id).id == earlier.analysis.id


def test_analysis_error_moves_to_error(manager, store):
    s = manager.create_session("u1", duration_seconds=8)
    failed = manager.record_analysis_result(s.id, AnalysisError("transcription unavailable"))
    assert failed.status == SessionStatus.ERROR
    assert failed.has_analysis is False
    assert failed.error_message == "transcription unavailable"
    assert store.query_documents(ANALYSES, session_id=s.id) == []
    assert store.query_documents(FEEDBACK, session_id=s.id) == []


def test_upstream_error_in_payload(manager):
    s = manager.create_session("u1", duration_seconds=8)
    out = manager.analyze_session(s.id, {"transcription": "", "durationSeconds": 8, "error": "no audio"})
    assert out.status == SessionStatus.ERROR
    assert manager.get_analysis(s.id) is None


def test_invalid_duration_in_result_fails_session(manager):
    s = manager.create_session("u1", duration_seconds=8)
    out = manager.analyze_session(s.id, {"transcription": "hello there", "durationSeconds": -1})
    assert out.status == SessionStatus.ERROR
    assert manager.get_analysis(s.id) is None


def test_zero_duration_result_still_completes(manager):
    s = manager.create_session("u1", duration_seconds=8)
    out = manager.analyze_session(s.id, {"transcription": "hello there", "durationSeconds": 0})
    assert out.status == SessionStatus.COMPLETED
    assert manager.get_analysis(s.id).metrics.words_per_minute == 0


def test_terminal_states_never_change(manager, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    manager.record_analysis_result(s.id, AnalysisError("boom"))
    after = manager.record_analysis_result(s.id, analyze(s, scenario_result))
    assert after.status == SessionStatus.ERROR
    assert manager.get_analysis(s.id) is None


def test_result_for_another_session_is_rejected(manager, scenario_result):
    a = manager.create_session("u1", duration_seconds=8)
    b = manager.create_session("u1", duration_seconds=8)
    with pytest.raises(InvalidInputError):
        manager.record_analysis_result(b.id, analyze(a, scenario_result))
    assert manager.get_session(b.id).status == SessionStatus.PROCESSING


def test_unknown_session(manager):
    assert manager.get_session("missing") is None
    with pytest.raises(SessionNotFoundError):
        manager.record_analysis_result("missing", AnalysisError())


def test_outcome_needs_both_records():
    with pytest.raises(InvalidInputError):
        AnalysisOutcome(analysis=None, feedback=None)


def test_concurrent_duplicate_delivery(manager, store, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    outcome = analyze(s, scenario_result)
    results = []
    threads = [threading.Thread(target=lambda: results.append(manager.record_analysis_result(s.id, outcome)))
               for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store.query_documents(ANALYSES, session_id=s.id)) == 1
    assert all(r.status == SessionStatus.COMPLETED for r in results)


def _seed(store, user_id, type_, duration, minutes_ago, status="processing"):
    s = Session(user_id=user_id, type=type_, duration_seconds=duration, status=status,
                created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago))
    store.save_document(SESSIONS, s)
    return s


def test_list_sessions_filter_sort_paginate(manager, store):
    newest = _seed(store, "u1", "freestyle", 30, 1)
    middle = _seed(store, "u1", "qa", 90, 5, status="error")
    oldest = _seed(store, "u1", "freestyle", 10, 10)
    _seed(store, "u2", "freestyle", 20, 0)

    assert [s.id for s in manager.list_sessions("u1")] == [newest.id, middle.id, oldest.id]
    assert [s.id for s in manager.list_sessions("u1", sort_order="asc")] == [oldest.id, middle.id, newest.id]
    assert [s.id for s in manager.list_sessions("u1", sort_by="duration")] == [middle.id, newest.id, oldest.id]
    assert [s.id for s in manager.list_sessions("u1", session_type="freestyle")] == [newest.id, oldest.id]
    assert [s.id for s in manager.list_sessions("u1", limit=1, offset=1)] == [middle.id]
    assert [s.id for s in manager.list_sessions("u1", status="error")] == [middle.id]
    with pytest.raises(InvalidInputError):
        manager.list_sessions("u1", sort_by="title")
    with pytest.raises(InvalidInputError):
        manager.list_sessions("u1", session_type="lecture")


def test_delete_session_removes_downstream(manager, store, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    manager.analyze_session(s.id, scenario_result)
    with pytest.raises(PermissionDeniedError):
        manager.delete_session(s.id, "someone-else")
    assert manager.delete_session(s.id, "u1")
    assert manager.get_session(s.id) is None
    assert store.query_documents(ANALYSES, session_id=s.id) == []
    assert store.query_documents(FEEDBACK, session_id=s.id) == []


def test_error_sessions_are_listable_and_deletable(manager):
    s = manager.create_session("u1", duration_seconds=8)
    manager.record_analysis_result(s.id, AnalysisError("boom"))
    assert [x.id for x in manager.list_sessions("u1")] == [s.id]
    manager.delete_session(s.id, "u1")
    assert manager.list_sessions("u1") == []


def test_feedback_viewed_once(manager, scenario_result):
    s = manager.create_session("u1", duration_seconds=8)
    manager.analyze_session(s.id, scenario_result)
    fb = manager.get_feedback(s.id)
    first_seen = datetime(2026, 2, 1, tzinfo=timezone.utc)
    viewed = manager.mark_feedback_viewed(fb.id, viewed_at=first_seen)
    assert viewed.viewed_at == first_seen
    again = manager.mark_feedback_viewed(fb.id)
    assert again.viewed_at == first_seen
    with pytest.raises(NotFoundError):
        manager.mark_feedback_viewed("missing")


def test_progress_for_user(manager, scenario_result):
    for _ in range(2):
        s = manager.create_session("u1", duration_seconds=8)
        manager.analyze_session(s.id, scenario_result)
    summary = manager.progress("u1")
    assert summary["total_sessions"] == 2
    assert summary["averages"]["words_per_minute"] == 60
    assert summary["comparison"]["improvement"] is False
