"""Record types exchanged between the analysis pipeline, the session
lifecycle and the persistence layer.

Attributes are snake_case; the document form handed to persistence
(``to_document()``) uses camelCase keys (``userId``, ``hasAnalysis`` ...).
"""
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidInputError


def utcnow():
    return datetime.now(timezone.utc)


def new_id():
    return uuid4().hex


class SessionType(str, Enum):
    FREESTYLE = "freestyle"
    GUIDED = "guided"
    QA = "qa"


class SessionStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self):
        return self is not SessionStatus.PROCESSING


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @classmethod
    def parse(cls, data):
        """Validate ``data`` (camelCase or snake_case keys), raising
        InvalidInputError instead of pydantic's ValidationError."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(f"invalid {cls.__name__}: {e}") from e

    def to_document(self):
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class WordTiming(Record):
    word: str
    start_time: float = Field(ge=0)
    end_time: float = Field(ge=0)

    @model_validator(mode="after")
    def _ordered(self):
        if self.start_time > self.end_time:
            raise ValueError("start_time must not be after end_time")
        return self


class FillerInstance(Record):
    word: str
    timestamp: float = Field(ge=0)


class Pause(Record):
    start: float = Field(ge=0)
    end: float = Field(ge=0)
    duration: float = Field(ge=0)


class SpeechMetrics(Record):
    words_per_minute: float = Field(ge=0)
    total_words: int = Field(ge=0)
    duration_seconds: float = Field(ge=0)
    filler_word_counts: Dict[str, int] = Field(default_factory=dict)
    total_filler_words: int = Field(ge=0)
    filler_word_percentage: float = Field(ge=0)
    clarity_score: float = Field(ge=0, le=100)

    @model_validator(mode="after")
    def _consistent(self):
        if any(v < 0 for v in self.filler_word_counts.values()):
            raise ValueError("filler word counts must be non-negative")
        if sum(self.filler_word_counts.values()) != self.total_filler_words:
            raise ValueError("total_filler_words must equal the sum of filler_word_counts")
        expected = self.total_filler_words / self.total_words * 100 if self.total_words else 0.0
        if not math.isclose(self.filler_word_percentage, expected, rel_tol=1e-9, abs_tol=1e-9):
            raise ValueError("filler_word_percentage does not match totals")
        return self


class SpeechAnalysis(Record):
    id: str = Field(default_factory=new_id)
    session_id: str
    user_id: str
    transcription: str
    metrics: SpeechMetrics
    word_timings: Optional[List[WordTiming]] = None
    filler_instances: Optional[List[FillerInstance]] = None
    pauses: Optional[List[Pause]] = None
    timestamp: datetime = Field(default_factory=utcnow)


class FeedbackContent(Record):
    positive: str = Field(min_length=1)
    improvement: str = Field(min_length=1)
    suggestion: str = Field(min_length=1)
    encouragement: str = Field(min_length=1)

    @property
    def full_text(self):
        return "\n\n".join([self.positive, self.improvement, self.suggestion, self.encouragement])


class Feedback(Record):
    id: str = Field(default_factory=new_id)
    user_id: str
    analysis_id: str
    session_id: str
    text_feedback: FeedbackContent
    audio_feedback_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    viewed_at: Optional[datetime] = None


class Session(Record):
    id: str = Field(default_factory=new_id)
    user_id: str = Field(min_length=1)
    type: SessionType = SessionType.FREESTYLE
    status: SessionStatus = SessionStatus.PROCESSING
    recording_url: Optional[str] = None
    duration_seconds: float = Field(gt=0)
    created_at: datetime = Field(default_factory=utcnow)
    has_analysis: bool = False
    has_feedback: bool = False
    title: Optional[str] = None
    error_message: Optional[str] = None


class TranscriptionResult(Record):
    """What the external transcription step hands to the pipeline."""

    transcription: str = ""
    word_timings: Optional[List[WordTiming]] = None
    duration_seconds: float
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    # set by the transcription collaborator when it could not produce text
    error: Optional[str] = None
