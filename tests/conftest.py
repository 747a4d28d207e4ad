import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from speakbetter import create_app
from speakbetter.schemas import WordTiming
from speakbetter.services.sessions import SessionManager
from speakbetter.services.store import MemoryDocumentStore

SCENARIO_TRANSCRIPT = "um so I think uh this is great"


def timings_for(transcript, interval=1.0):
    return [WordTiming(word=w, start_time=i * interval, end_time=(i + 1) * interval)
            for i, w in enumerate(transcript.split())]


@pytest.fixture
def app():
    app = create_app('config.TestConfig')
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store():
    return MemoryDocumentStore()


@pytest.fixture
def manager(store):
    return SessionManager(store)


@pytest.fixture
def scenario_result():
    return {
        "transcription": SCENARIO_TRANSCRIPT,
        "wordTimings": [t.to_document() for t in timings_for(SCENARIO_TRANSCRIPT)],
        "durationSeconds": 8,
    }
