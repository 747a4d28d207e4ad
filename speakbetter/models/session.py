from ..extensions import db
from ..schemas import Session
from .base import UserScopedMixin, TimestampMixin

class SessionRecord(db.Model, UserScopedMixin, TimestampMixin):
    __tablename__ = "sessions"

    id = db.Column(db.String(32), primary_key=True)
    # UserScopedMixin: user_id
    type = db.Column(db.String(20), nullable=False, default="freestyle")  # freestyle/guided/qa
    # processing -> completed | error, never backwards
    status = db.Column(db.String(20), nullable=False, default="processing", index=True)
    recording_url = db.Column(db.String(512))
    duration_seconds = db.Column(db.Float, nullable=False)
    title = db.Column(db.String(200))
    error_message = db.Column(db.Text)
    has_analysis = db.Column(db.Boolean, nullable=False, default=False)
    has_feedback = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, index=True)

    def apply(self, rec):
        self.id = rec.id
        self.user_id = rec.user_id
        self.type = rec.type.value
        self.status = rec.status.value
        self.recording_url = rec.recording_url
        self.duration_seconds = rec.duration_seconds
        self.title = rec.title
        self.error_message = rec.error_message
        self.has_analysis = rec.has_analysis
        self.has_feedback = rec.has_feedback
        self.created_at = rec.created_at

    def to_record(self):
        return Session(
            id=self.id, user_id=self.user_id, type=self.type, status=self.status,
            recording_url=self.recording_url, duration_seconds=self.duration_seconds,
            title=self.title, error_message=self.error_message,
            has_analysis=bool(self.has_analysis), has_feedback=bool(self.has_feedback),
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return f"<SessionRecord id={self.id} status={self.status}>"
