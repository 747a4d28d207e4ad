"""Session lifecycle: processing -> completed | error.

``SessionManager`` is a state-transition function in front of a
``DocumentStore``; it keeps no durable state of its own. Callers create
their own manager with the store they want.
"""
import logging
import threading

from ..errors import (AnalysisError, DuplicateDocumentError, InvalidInputError,
                      NotFoundError, PermissionDeniedError, SessionNotFoundError)
from ..schemas import Session, SessionStatus, SessionType, utcnow
from .pipeline import AnalysisOutcome, analyze
from .progress import summarize_progress
from .store import ANALYSES, FEEDBACK, SESSIONS

logger = logging.getLogger(__name__)

SORT_KEYS = {"created_at": "created_at", "duration": "duration_seconds"}


class SessionManager:
    def __init__(self, store):
        self.store = store
        # serializes transitions issued through this manager; the store's
        # one-analysis-per-session constraint covers other processes
        self._lock = threading.RLock()

    # -- queries -----------------------------------------------------------

    def get_session(self, session_id):
        return self.store.fetch_document(SESSIONS, session_id)

    def _require(self, session_id):
        session = self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"session {session_id} not found")
        return session

    def list_sessions(self, user_id, limit=None, offset=0, session_type=None,
                      sort_by="created_at", sort_order="desc", status=None):
        if sort_by not in SORT_KEYS:
            raise InvalidInputError(f"sort_by must be one of {sorted(SORT_KEYS)}")
        if sort_order not in ("asc", "desc"):
            raise InvalidInputError("sort_order must be 'asc' or 'desc'")
        if (limit is not None and limit < 0) or offset < 0:
            raise InvalidInputError("limit and offset must be non-negative")

        filters = {"user_id": user_id}
        try:
            if session_type:
                filters["type"] = SessionType(session_type)
            if status:
                filters["status"] = SessionStatus(status)
        except ValueError as e:
            raise InvalidInputError(str(e)) from e

        attr = SORT_KEYS[sort_by]
        sessions = self.store.query_documents(SESSIONS, **filters)
        sessions.sort(key=lambda s: (getattr(s, attr), s.id), reverse=(sort_order == "desc"))
        end = None if limit is None else offset + limit
        return sessions[offset:end]

    def get_analysis(self, session_id):
        found = self.store.query_documents(ANALYSES, session_id=session_id)
        return found[0] if found else None

    def get_feedback(self, session_id):
        found = self.store.query_documents(FEEDBACK, session_id=session_id)
        return found[0] if found else None

    def progress(self, user_id):
        return summarize_progress(self.store.query_documents(ANALYSES, user_id=user_id))

    # -- transitions -------------------------------------------------------

    def create_session(self, user_id, session_type="freestyle", duration_seconds=None,
                       recording_url=None, title=None):
        session = Session.parse({
            "user_id": user_id,
            "type": session_type,
            "duration_seconds": duration_seconds,
            "recording_url": recording_url,
            "title": title,
        })
        self.store.save_document(SESSIONS, session)
        logger.info("created session %s for user %s", session.id, user_id)
        return session

    def record_analysis_result(self, session_id, outcome):
        """Move a processing session to its terminal state.

        ``outcome`` is an AnalysisOutcome, or a bare AnalysisError for a
        failure. A session that is already terminal is returned unchanged, so
        repeated delivery of the same result is harmless.
        """
        if isinstance(outcome, AnalysisError):
            outcome = AnalysisOutcome.failed(outcome)

        with self._lock:
            session = self._require(session_id)
            if session.status.is_terminal:
                logger.info("session %s already %s, ignoring result", session_id, session.status.value)
                return session

            if not outcome.succeeded:
                # a failed session keeps no analysis or feedback
                self._purge_downstream(session_id)
                updated = session.model_copy(update={
                    "status": SessionStatus.ERROR,
                    "error_message": outcome.error.message,
                })
                self.store.save_document(SESSIONS, updated)
                logger.warning("session %s failed: %s", session_id, outcome.error.message)
                return updated

            analysis, feedback = outcome.analysis, outcome.feedback
            if (analysis.session_id != session.id or feedback.session_id != session.id
                    or analysis.user_id != session.user_id or feedback.analysis_id != analysis.id):
                raise InvalidInputError(f"analysis result does not belong to session {session_id}")

            try:
                self.store.save_document(ANALYSES, analysis)
            except DuplicateDocumentError:
                logger.info("analysis for session %s already stored", session_id)
                if self.get_feedback(session_id) is None:
                    # another worker is still writing its records
                    return self._require(session_id)
                return self._complete(self._require(session_id))
            try:
                self.store.save_document(FEEDBACK, feedback)
            except Exception:
                self.store.delete_document(ANALYSES, analysis.id)
                raise
            try:
                updated = self._complete(session)
            except Exception:
                self.store.delete_document(FEEDBACK, feedback.id)
                self.store.delete_document(ANALYSES, analysis.id)
                raise
            logger.info("session %s completed (analysis %s)", session_id, analysis.id)
            return updated

    def _complete(self, session):
        if session.status.is_terminal:
            return session
        updated = session.model_copy(update={
            "status": SessionStatus.COMPLETED,
            "has_analysis": True,
            "has_feedback": True,
        })
        self.store.save_document(SESSIONS, updated)
        return updated

    def _purge_downstream(self, session_id):
        for fb in self.store.query_documents(FEEDBACK, session_id=session_id):
            self.store.delete_document(FEEDBACK, fb.id)
        for an in self.store.query_documents(ANALYSES, session_id=session_id):
            self.store.delete_document(ANALYSES, an.id)

    def analyze_session(self, session_id, result, config=None, goals=None):
        """Run the pipeline on ``result`` and record the outcome."""
        session = self._require(session_id)
        if session.status.is_terminal:
            return session
        outcome = analyze(session, result, config=config, goals=goals)
        return self.record_analysis_result(session_id, outcome)

    def mark_feedback_viewed(self, feedback_id, viewed_at=None):
        feedback = self.store.fetch_document(FEEDBACK, feedback_id)
        if feedback is None:
            raise NotFoundError(f"feedback {feedback_id} not found")
        if feedback.viewed_at is not None:
            return feedback
        updated = feedback.model_copy(update={"viewed_at": viewed_at or utcnow()})
        self.store.save_document(FEEDBACK, updated)
        return updated

    def delete_session(self, session_id, user_id):
        """Delete a session (in any state) with its analysis and feedback."""
        with self._lock:
            session = self._require(session_id)
            if session.user_id != user_id:
                raise PermissionDeniedError(f"session {session_id} belongs to another user")
            self._purge_downstream(session_id)
            self.store.delete_document(SESSIONS, session_id)
        logger.info("deleted session %s", session_id)
        return True
