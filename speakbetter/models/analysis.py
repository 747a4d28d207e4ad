from ..extensions import db
from ..schemas import SpeechAnalysis
from .base import UserScopedMixin, TimestampMixin

class AnalysisRecord(db.Model, UserScopedMixin, TimestampMixin):
    __tablename__ = "speech_analyses"

    id = db.Column(db.String(32), primary_key=True)
    # one analysis per session
    session_id = db.Column(db.String(32), db.ForeignKey("sessions.id"), nullable=False, unique=True)
    transcription = db.Column(db.Text, nullable=False, default="")
    metrics = db.Column(db.JSON, nullable=False)
    word_timings = db.Column(db.JSON)      # [{"word":"um","startTime":0.0,"endTime":0.4}]
    filler_instances = db.Column(db.JSON)  # [{"word":"um","timestamp":0.0}]
    pauses = db.Column(db.JSON)
    timestamp = db.Column(db.DateTime, nullable=False)

    def apply(self, rec):
        doc = rec.to_document()
        self.id = rec.id
        self.session_id = rec.session_id
        self.user_id = rec.user_id
        self.transcription = rec.transcription
        self.metrics = doc["metrics"]
        self.word_timings = doc.get("wordTimings")
        self.filler_instances = doc.get("fillerInstances")
        self.pauses = doc.get("pauses")
        self.timestamp = rec.timestamp

    def to_record(self):
        return SpeechAnalysis.parse({
            "id": self.id,
            "sessionId": self.session_id,
            "userId": self.user_id,
            "transcription": self.transcription,
            "metrics": self.metrics,
            "wordTimings": self.word_timings,
            "fillerInstances": self.filler_instances,
            "pauses": self.pauses,
            "timestamp": self.timestamp,
        })

    def __repr__(self) -> str:
        return f"<AnalysisRecord id={self.id} session_id={self.session_id}>"
