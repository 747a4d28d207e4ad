"""Tunable data for the analysis pipeline.

Every threshold and weight the pipeline uses lives here so it can be
changed from the Flask config (or the environment, see ``config.py``)
without touching pipeline code.
"""
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .normalizer import normalize_term

DEFAULT_FILLER_TERMS = (
    "um", "uh", "uhm", "er", "ah", "hmm", "like",
    "you know", "i mean", "kind of", "sort of",
    "actually", "basically", "literally",
)


class AnalysisConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    #: filler words / phrases, matched case-insensitively
    filler_terms: Tuple[str, ...] = DEFAULT_FILLER_TERMS
    #: report immediately repeated words ("I I think") as fillers
    detect_repetitions: bool = False
    #: word/timing count difference tolerated before an AlignmentWarning
    alignment_tolerance: int = Field(default=2, ge=0)
    #: gap between timed words reported as a long pause, in seconds
    long_pause_seconds: float = Field(default=2.0, gt=0)
    #: target pace band in words per minute
    target_wpm_min: float = Field(default=120.0, ge=0)
    target_wpm_max: float = Field(default=160.0, ge=0)
    #: clarity points lost per filler percentage point, and the most it can cost
    clarity_filler_weight: float = Field(default=3.0, ge=0)
    clarity_filler_cap: float = Field(default=60.0, ge=0, le=100)
    #: clarity points lost per WPM outside the target band, and the most it can cost
    clarity_pace_weight: float = Field(default=0.5, ge=0)
    clarity_pace_cap: float = Field(default=40.0, ge=0, le=100)

    @field_validator("filler_terms", mode="before")
    @classmethod
    def _split_terms(cls, v):
        if isinstance(v, str):
            v = v.split(",")
        terms = []
        for t in v:
            t = normalize_term(t)
            if t and t not in terms:
                terms.append(t)
        return tuple(terms)

    @model_validator(mode="after")
    def _band(self):
        if self.target_wpm_min > self.target_wpm_max:
            raise ValueError("target_wpm_min must not exceed target_wpm_max")
        return self

    @classmethod
    def from_mapping(cls, mapping):
        """Build from a Flask config (upper-case keys); missing keys keep defaults."""
        values = {}
        for name in cls.model_fields:
            key = name.upper()
            if key in mapping and mapping[key] is not None:
                values[name] = mapping[key]
        return cls(**values)
