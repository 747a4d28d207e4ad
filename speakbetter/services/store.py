"""Persistence port for sessions, analyses and feedback.

The session lifecycle talks to storage only through ``save_document``,
``fetch_document``, ``query_documents`` and ``delete_document``.
``MemoryDocumentStore`` keeps camelCase documents in process (tests, scripts);
``SqlDocumentStore`` maps the same calls onto the Flask-SQLAlchemy models.
"""
import copy
import logging
import threading

from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateDocumentError, InvalidInputError
from ..schemas import Feedback, Session, SpeechAnalysis

logger = logging.getLogger(__name__)

SESSIONS = "sessions"
ANALYSES = "speech_analyses"
FEEDBACK = "feedback"

RECORD_TYPES = {
    SESSIONS: Session,
    ANALYSES: SpeechAnalysis,
    FEEDBACK: Feedback,
}

# collections holding at most one document per session
UNIQUE_PER_SESSION = (ANALYSES, FEEDBACK)


def _check_collection(collection):
    if collection not in RECORD_TYPES:
        raise InvalidInputError(f"unknown collection {collection!r}")
    return RECORD_TYPES[collection]


def _matches(record, filters):
    return all(getattr(record, k) == v for k, v in filters.items())


class DocumentStore:
    """Interface implemented by the stores below."""

    def save_document(self, collection, record):
        raise NotImplementedError

    def fetch_document(self, collection, doc_id):
        raise NotImplementedError

    def query_documents(self, collection, **filters):
        raise NotImplementedError

    def delete_document(self, collection, doc_id):
        raise NotImplementedError


class MemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._docs = {name: {} for name in RECORD_TYPES}
        self._lock = threading.Lock()

    def save_document(self, collection, record):
        _check_collection(collection)
        doc = record.to_document()
        with self._lock:
            docs = self._docs[collection]
            if collection in UNIQUE_PER_SESSION:
                for other in docs.values():
                    if other["sessionId"] == doc["sessionId"] and other["id"] != doc["id"]:
                        raise DuplicateDocumentError(
                            f"{collection} already has a document for session {doc['sessionId']}")
            docs[doc["id"]] = doc
        return record

    def fetch_document(self, collection, doc_id):
        cls = _check_collection(collection)
        with self._lock:
            doc = copy.deepcopy(self._docs[collection].get(doc_id))
        return cls.parse(doc) if doc is not None else None

    def query_documents(self, collection, **filters):
        cls = _check_collection(collection)
        with self._lock:
            docs = copy.deepcopy(list(self._docs[collection].values()))
        records = [cls.parse(d) for d in docs]
        return [r for r in records if _matches(r, filters)]

    def delete_document(self, collection, doc_id):
        _check_collection(collection)
        with self._lock:
            return self._docs[collection].pop(doc_id, None) is not None


class SqlDocumentStore(DocumentStore):
    """Store backed by the SQLAlchemy models; needs an app context."""

    def __init__(self, db=None):
        if db is None:
            from ..extensions import db
        self.db = db

    def _model(self, collection):
        _check_collection(collection)
        from ..models import AnalysisRecord, FeedbackRecord, SessionRecord
        return {SESSIONS: SessionRecord, ANALYSES: AnalysisRecord, FEEDBACK: FeedbackRecord}[collection]

    def save_document(self, collection, record):
        model = self._model(collection)
        row = self.db.session.get(model, record.id)
        if row is None:
            row = model()
        row.apply(record)
        self.db.session.add(row)
        try:
            self.db.session.commit()
        except IntegrityError as e:
            self.db.session.rollback()
            logger.info('duplicate %s document for session %s', collection, getattr(record, 'session_id', None))
            raise DuplicateDocumentError(str(e.orig)) from e
        return record

    def fetch_document(self, collection, doc_id):
        row = self.db.session.get(self._model(collection), doc_id)
        return row.to_record() if row is not None else None

    def query_documents(self, collection, **filters):
        model = self._model(collection)
        q = model.query
        for key, value in filters.items():
            value = getattr(value, 'value', value)
            q = q.filter(getattr(model, key) == value)
        return [row.to_record() for row in q.all()]

    def delete_document(self, collection, doc_id):
        row = self.db.session.get(self._model(collection), doc_id)
        if row is None:
            return False
        self.db.session.delete(row)
        self.db.session.commit()
        return True
