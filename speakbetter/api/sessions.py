# speakbetter/api/sessions.py
from flask import Blueprint, request, jsonify, current_app
from ..errors import InvalidInputError, NotFoundError, PermissionDeniedError
from ..extensions import rq
from ..jobs.analyze import analyze_session
from ..schemas import TranscriptionResult
from ..services.sessions import SessionManager
from ..services.store import SqlDocumentStore

bp = Blueprint("api", __name__)

# query-string names -> SessionManager.list_sessions sort keys
SORT_BY = {"createdAt": "created_at", "created_at": "created_at", "duration": "duration"}


def _manager():
    return SessionManager(SqlDocumentStore())


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("JSON object body required")
    return data


@bp.errorhandler(InvalidInputError)
def _bad_request(e):
    return jsonify({"error": str(e)}), 400


@bp.errorhandler(PermissionDeniedError)
def _forbidden(e):
    return jsonify({"error": str(e)}), 403


@bp.errorhandler(NotFoundError)
def _not_found(e):
    return jsonify({"error": str(e)}), 404


@bp.post("/sessions")
def create_session():
    data = _json_body()
    session = _manager().create_session(
        user_id=data.get("userId"),
        session_type=data.get("type", "freestyle"),
        duration_seconds=data.get("durationSeconds"),
        recording_url=data.get("recordingUrl"),
        title=data.get("title"),
    )
    return jsonify(session.to_document()), 201


@bp.get("/sessions")
def list_sessions():
    user_id = request.args.get("userId")
    if not user_id:
        raise InvalidInputError("userId is required")
    sort_by = request.args.get("sortBy", "createdAt")
    if sort_by not in SORT_BY:
        raise InvalidInputError(f"unsupported sortBy {sort_by!r}")
    sessions = _manager().list_sessions(
        user_id,
        limit=request.args.get("limit", type=int),
        offset=request.args.get("offset", default=0, type=int),
        session_type=request.args.get("type"),
        status=request.args.get("status"),
        sort_by=SORT_BY[sort_by],
        sort_order=request.args.get("sortOrder", "desc"),
    )
    return jsonify({"sessions": [s.to_document() for s in sessions]})


@bp.get("/sessions/<session_id>")
def get_session(session_id):
    session = _manager().get_session(session_id)
    if session is None:
        return jsonify({"error": "session not found"}), 404
    return jsonify(session.to_document())


@bp.delete("/sessions/<session_id>")
def delete_session(session_id):
    user_id = request.args.get("userId")
    if not user_id:
        raise InvalidInputError("userId is required")
    _manager().delete_session(session_id, user_id)
    return jsonify({"deleted": True, "sessionId": session_id})


@bp.post("/sessions/<session_id>/analysis")
def submit_transcription(session_id):
    """Accept a transcription result and queue the analysis job."""
    data = _json_body()
    goals = data.pop("goals", None)
    if goals is not None and (not isinstance(goals, list)
                              or not all(isinstance(g, str) for g in goals)):
        raise InvalidInputError("goals must be a list of strings")
    result = TranscriptionResult.parse(data)
    manager = _manager()
    session = manager.get_session(session_id)
    if session is None:
        return jsonify({"error": "session not found"}), 404
    if session.status.is_terminal:
        return jsonify(session.to_document()), 200

    rq.enqueue(analyze_session, session_id, result.to_document(), goals,
               job_timeout=current_app.config.get("ANALYSIS_JOB_TIMEOUT", 300))
    # with the synchronous fallback the session is already terminal here
    session = manager.get_session(session_id) or session
    return jsonify(session.to_document()), 202


@bp.get("/sessions/<session_id>/analysis")
def get_analysis(session_id):
    analysis = _manager().get_analysis(session_id)
    if analysis is None:
        return jsonify({"error": "analysis not found"}), 404
    return jsonify(analysis.to_document())


@bp.get("/sessions/<session_id>/feedback")
def get_feedback(session_id):
    feedback = _manager().get_feedback(session_id)
    if feedback is None:
        return jsonify({"error": "feedback not found"}), 404
    return jsonify(feedback.to_document())


@bp.post("/feedback/<feedback_id>/viewed")
def mark_viewed(feedback_id):
    feedback = _manager().mark_feedback_viewed(feedback_id)
    return jsonify(feedback.to_document())


@bp.get("/users/<user_id>/progress")
def user_progress(user_id):
    return jsonify(_manager().progress(user_id))
