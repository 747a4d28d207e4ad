"""One linear pass from a transcription result to analysis + feedback.

Normalizer -> filler detector -> metrics aggregator -> feedback synthesizer.
Every stage is a pure function of its inputs; failures are returned as an
``AnalysisOutcome`` rather than raised, so the session lifecycle can always
pick the right terminal state.
"""
import logging

from ..errors import AnalysisError, InvalidInputError
from ..schemas import Feedback, SpeechAnalysis, TranscriptionResult
from .analysis_config import AnalysisConfig
from .feedback import synthesize
from .fillers import FillerDetector, detect_pauses
from .metrics import aggregate
from .normalizer import normalize

logger = logging.getLogger(__name__)


class AnalysisOutcome:
    """Either an (analysis, feedback) pair or an AnalysisError."""

    def __init__(self, analysis=None, feedback=None, error=None):
        if error is None and (analysis is None or feedback is None):
            raise InvalidInputError("a successful outcome needs both analysis and feedback")
        self.analysis = analysis
        self.feedback = feedback
        self.error = error

    @classmethod
    def ok(cls, analysis, feedback):
        return cls(analysis=analysis, feedback=feedback)

    @classmethod
    def failed(cls, error):
        if not isinstance(error, AnalysisError):
            error = AnalysisError(str(error))
        return cls(error=error)

    @property
    def succeeded(self):
        return self.error is None

    def __repr__(self):
        if self.succeeded:
            return f"<AnalysisOutcome ok analysis={self.analysis.id}>"
        return f"<AnalysisOutcome error={self.error.message!r}>"


def analyze(session, result, config=None, goals=None) -> AnalysisOutcome:
    config = config or AnalysisConfig()
    try:
        if isinstance(result, dict):
            result = TranscriptionResult.parse(result)
        if result.error:
            raise AnalysisError(result.error, code="transcription_unavailable")

        tokens = normalize(result.transcription, result.word_timings,
                           tolerance=config.alignment_tolerance,
                           duration_seconds=result.duration_seconds)
        fillers = FillerDetector.from_config(config).detect(tokens)
        pauses = detect_pauses(tokens, config.long_pause_seconds)
        metrics = aggregate(tokens, fillers, result.duration_seconds, config)

        analysis = SpeechAnalysis(
            session_id=session.id,
            user_id=session.user_id,
            transcription=result.transcription,
            metrics=metrics,
            word_timings=result.word_timings,
            filler_instances=fillers,
            pauses=pauses,
        )
        feedback = Feedback(
            user_id=session.user_id,
            analysis_id=analysis.id,
            session_id=session.id,
            text_feedback=synthesize(metrics, fillers, goals=goals),
        )
    except AnalysisError as e:
        logger.warning("analysis failed for session %s: %s", session.id, e.message)
        return AnalysisOutcome.failed(e)
    except InvalidInputError as e:
        logger.warning("invalid analysis input for session %s: %s", session.id, e)
        return AnalysisOutcome.failed(AnalysisError(str(e), code="invalid_input"))

    logger.info("analyzed session %s: %d words, %d fillers, clarity %.2f",
                session.id, metrics.total_words, metrics.total_filler_words, metrics.clarity_score)
    return AnalysisOutcome.ok(analysis, feedback)
