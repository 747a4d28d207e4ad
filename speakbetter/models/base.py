from ..extensions import db

class UserScopedMixin:
    user_id = db.Column(db.String(128), nullable=False, index=True)

class TimestampMixin:
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
