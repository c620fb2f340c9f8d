"""
Pytest configuration for the AviatorScript Playground test suite.

Provides stand-ins for the external analyzer and engine.
"""
import threading

import pytest
from loguru import logger

from aviator_ide import EngineError, PlaygroundSession

pytest_plugins = ["pytest_asyncio"]


class FakeAnalyzer:
    """Returns queued diagnostics, or raises when told to"""

    def __init__(self, diagnostics=None, error=None):
        self.diagnostics = diagnostics or []
        self.error = error
        self.calls = []

    def analyze(self, text):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.diagnostics)


class FakeEngine:
    """Emits the given lines through the context, then returns or raises"""

    def __init__(self, lines=(), result=None, error=None, function="p"):
        self.lines = list(lines)
        self.result = result
        self.error = error
        self.function = function
        self.calls = []
        self.threads = []

    def execute(self, text, context):
        self.calls.append(text)
        self.threads.append(threading.current_thread())
        for line in self.lines:
            context[self.function](line)
        if self.error is not None:
            raise self.error
        return self.result


class BlockingEngine:
    """Holds the run open until released, so a second request can race it"""

    def __init__(self, result=None):
        self.result = result
        self.started = threading.Event()
        self.release = threading.Event()

    def execute(self, text, context):
        self.started.set()
        self.release.wait(timeout=5)
        return self.result


class RecordingWidget:
    def __init__(self):
        self.languages = []
        self.marker_calls = []

    def register_language(self, language_id, grammar):
        self.languages.append((language_id, grammar))

    def set_markers(self, owner, markers):
        self.marker_calls.append((owner, list(markers)))


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def engine():
    return FakeEngine(lines=["x = 5"], result=5)


@pytest.fixture
def widget():
    return RecordingWidget()


@pytest.fixture
def session(analyzer, engine):
    playground = PlaygroundSession(analyzer=analyzer, engine=engine, initial_text="let x = 5;", use_worker=False)
    playground.mount()
    return playground


@pytest.fixture
def log_messages():
    """Capture loguru output for the duration of a test"""
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def division_error():
    return EngineError("division by zero")
