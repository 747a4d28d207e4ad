from ..extensions import db
from ..schemas import Feedback
from .base import UserScopedMixin, TimestampMixin

class FeedbackRecord(db.Model, UserScopedMixin, TimestampMixin):
    __tablename__ = "feedback"

    id = db.Column(db.String(32), primary_key=True)
    session_id = db.Column(db.String(32), db.ForeignKey("sessions.id"), nullable=False, unique=True)
    analysis_id = db.Column(db.String(32), db.ForeignKey("speech_analyses.id"), nullable=False)
    text_feedback = db.Column(db.JSON, nullable=False)  # positive/improvement/suggestion/encouragement
    audio_feedback_url = db.Column(db.String(512))
    created_at = db.Column(db.DateTime, nullable=False)
    viewed_at = db.Column(db.DateTime)  # set once, on first render

    def apply(self, rec):
        self.id = rec.id
        self.session_id = rec.session_id
        self.analysis_id = rec.analysis_id
        self.user_id = rec.user_id
        self.text_feedback = rec.text_feedback.to_document()
        self.audio_feedback_url = rec.audio_feedback_url
        self.created_at = rec.created_at
        self.viewed_at = rec.viewed_at

    def to_record(self):
        return Feedback(
            id=self.id, user_id=self.user_id, analysis_id=self.analysis_id,
            session_id=self.session_id, text_feedback=self.text_feedback,
            audio_feedback_url=self.audio_feedback_url,
            created_at=self.created_at, viewed_at=self.viewed_at,
        )
