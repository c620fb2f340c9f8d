"""
Tests for the OutputSink and line classification.
"""
import pytest

from aviator_ide.output import OutputKind, OutputSink, classify_line, render_line


class TestClassification:

    @pytest.mark.parametrize("line,kind", [
        ("Error: division by zero", OutputKind.ERROR),
        ("\nResult: 3", OutputKind.RESULT),
        ("Hello, World!", OutputKind.OUTPUT),
        ("Result: 3", OutputKind.OUTPUT),
        (" Error: indented", OutputKind.OUTPUT),
        ("", OutputKind.OUTPUT),
    ])
    def test_classify_by_prefix(self, line, kind):
        assert classify_line(line) == kind

    def test_result_line_is_trimmed_for_display(self):
        rendered = render_line("\nResult: 42")
        assert rendered.text == "Result: 42"
        assert rendered.to_dict() == {"text": "Result: 42", "kind": "result"}

    def test_program_output_is_untouched(self):
        assert render_line("  spaced  ").text == "  spaced  "


class TestOutputSink:

    def test_append_preserves_order(self):
        sink = OutputSink()
        for line in ["a", "b", "c"]:
            sink.append(line)
        assert sink.lines == ["a", "b", "c"]
        assert len(sink) == 3

    def test_lines_is_a_copy(self):
        sink = OutputSink()
        sink.append("a")
        sink.lines.append("mutated")
        assert sink.lines == ["a"]

    def test_clear(self):
        sink = OutputSink()
        sink.append("a")
        sink.clear()
        assert sink.lines == []

    def test_listeners(self):
        sink = OutputSink()
        events = []
        sink.on_append(lambda line: events.append(("append", line)))
        sink.on_clear(lambda: events.append(("clear", None)))

        sink.append("x")
        sink.clear()
        sink.append("y")

        assert events == [("append", "x"), ("clear", None), ("append", "y")]

    def test_rendered(self):
        sink = OutputSink()
        sink.append("x = 5")
        sink.append("Error: boom")
        assert [r.kind for r in sink.rendered()] == [OutputKind.OUTPUT, OutputKind.ERROR]
