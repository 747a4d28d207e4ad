from flask import current_app, has_app_context
from ..errors import AnalysisError, SessionNotFoundError
from ..services.analysis_config import AnalysisConfig
from ..services.sessions import SessionManager
from ..services.store import SqlDocumentStore


def _run_analysis(session_id: str, payload: dict, goals=None):
    manager = SessionManager(SqlDocumentStore())
    config = AnalysisConfig.from_mapping(current_app.config)
    try:
        session = manager.analyze_session(session_id, payload, config=config, goals=goals)
    except SessionNotFoundError:
        # deleted while the job was queued
        current_app.logger.warning('Session %s vanished before analysis', session_id)
        return None
    except Exception as e:
        current_app.logger.exception('Analysis job failed for session %s', session_id)
        # persist error state so the session does not stay in processing
        try:
            manager.record_analysis_result(session_id, AnalysisError(str(e) or e.__class__.__name__, code='internal'))
        except Exception:
            current_app.logger.exception('Failed to persist session error state')
        # re-raise so RQ shows job failure
        raise
    current_app.logger.info('Session %s analysis finished: %s', session_id, session.status.value)
    return session.to_document()


def analyze_session(session_id: str, payload: dict, goals=None):
    """Job entrypoint: runs inside a Flask app context so RQ workers can call
    it without setting one up.
    """
    if has_app_context():
        return _run_analysis(session_id, payload, goals)
    # lazy import to avoid circular imports at module import time
    from speakbetter import create_app
    app = create_app()
    with app.app_context():
        return _run_analysis(session_id, payload, goals)
