import os
import sys

# ensure project root is on sys.path so `import speakbetter` works when running this script
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from speakbetter import create_app
from speakbetter.extensions import db
from speakbetter.jobs.analyze import analyze_session
from speakbetter.services.sessions import SessionManager
from speakbetter.services.store import SqlDocumentStore

# Synchronous run of the analysis job (no RQ): creates a throwaway session,
# feeds it a canned transcription and prints the resulting records.

TRANSCRIPT = "um so I think uh this is great and you know it works"

app = create_app()
with app.app_context():
    db.create_all()
    manager = SessionManager(SqlDocumentStore())
    session = manager.create_session("smoke-user", "freestyle", duration_seconds=6)
    words = TRANSCRIPT.split()
    payload = {
        "transcription": TRANSCRIPT,
        "durationSeconds": 6,
        "wordTimings": [
            {"word": w, "startTime": i * 0.5, "endTime": i * 0.5 + 0.4} for i, w in enumerate(words)
        ],
    }
    print("session:", analyze_session(session.id, payload))
    analysis = manager.get_analysis(session.id)
    print("metrics:", analysis.metrics.to_document() if analysis else None)
    feedback = manager.get_feedback(session.id)
    print("feedback:", feedback.text_feedback.full_text if feedback else None)
