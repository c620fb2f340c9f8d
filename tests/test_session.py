"""
Tests for the PlaygroundSession state record and its event stream.
"""
import pytest

from aviator_ide import PlaygroundSession, RunState, WELCOME_SCRIPT

from conftest import FakeAnalyzer, FakeEngine


def drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


class TestSnapshot:

    def test_initial_snapshot(self, session):
        assert session.snapshot() == {
            "language": "aviator",
            "text": "let x = 5;",
            "line_count": 1,
            "state": "idle",
            "markers": [],
            "output": [],
        }

    def test_default_document_is_welcome_script(self):
        playground = PlaygroundSession(analyzer=FakeAnalyzer(), engine=FakeEngine())
        assert playground.document.text == WELCOME_SCRIPT
        assert 'p("Hello, World!");' in WELCOME_SCRIPT

    def test_mount_publishes_language(self):
        playground = PlaygroundSession(analyzer=FakeAnalyzer(), engine=FakeEngine(), use_worker=False)
        assert playground.widget.language_id is None
        playground.mount()
        assert playground.widget.language_id == "aviator"
        assert playground.widget.grammar["tokenizer"]["root"]


class TestRun:

    @pytest.mark.asyncio
    async def test_run_uses_current_document(self, session, engine):
        outcome = await session.run()

        assert engine.calls == ["let x = 5;"]
        assert outcome.lines == ["x = 5", "\nResult: 5"]
        assert session.state == RunState.IDLE

    @pytest.mark.asyncio
    async def test_run_with_text_leaves_document_alone(self, session, engine):
        await session.run("1 + 1")
        assert engine.calls == ["1 + 1"]
        assert session.document.text == "let x = 5;"

    @pytest.mark.asyncio
    async def test_run_events_in_order(self, session):
        queue = session.subscribe()

        await session.run()

        assert drain(queue) == [
            {"type": "state", "state": "running"},
            {"type": "output_cleared"},
            {"type": "output", "text": "x = 5", "kind": "output"},
            {"type": "output", "text": "Result: 5", "kind": "result"},
            {"type": "state", "state": "idle"},
        ]

    @pytest.mark.asyncio
    async def test_snapshot_after_failed_run(self, session, engine, division_error):
        engine.error = division_error
        await session.run()

        snapshot = session.snapshot()
        assert snapshot["state"] == "idle"
        assert snapshot["output"] == [
            {"text": "x = 5", "kind": "output"},
            {"text": "Error: division by zero", "kind": "error"},
        ]


class TestChange:

    @pytest.mark.asyncio
    async def test_change_publishes_monaco_markers(self, session, analyzer):
        analyzer.diagnostics = [{"line": 1, "message": "unexpected token", "severity": 1}]
        queue = session.subscribe()

        assert await session.change("let = ;") is True

        assert drain(queue) == [{
            "type": "markers",
            "owner": "aviator",
            "markers": [{
                "startLineNumber": 1,
                "endLineNumber": 1,
                "startColumn": 1,
                "endColumn": 1000,
                "message": "unexpected token",
                "severity": 8,
            }],
        }]
        assert session.snapshot()["text"] == "let = ;"

    @pytest.mark.asyncio
    async def test_snapshot_tracks_line_count(self, session):
        await session.change("let a = 1;\nlet b = 2;\np(a + b);")
        assert session.snapshot()["line_count"] == 3

    @pytest.mark.asyncio
    async def test_failed_analysis_publishes_nothing(self, session, analyzer):
        analyzer.error = RuntimeError("offline")
        queue = session.subscribe()

        assert await session.change("x") is False
        assert drain(queue) == []


class TestSubscribers:

    def test_unsubscribe_stops_delivery(self, session):
        queue = session.subscribe()
        session.unsubscribe(queue)
        session.publish({"type": "ping"})
        assert queue.empty()

    def test_unsubscribe_unknown_queue_is_ignored(self, session):
        queue = session.subscribe()
        session.unsubscribe(queue)
        session.unsubscribe(queue)

    def test_every_subscriber_gets_each_event(self, session):
        first, second = session.subscribe(), session.subscribe()
        session.publish({"type": "ping"})
        assert drain(first) == drain(second) == [{"type": "ping"}]
