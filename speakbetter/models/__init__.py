from .session import SessionRecord
from .analysis import AnalysisRecord
from .feedback import FeedbackRecord
# base mixins are imported by the above as needed
