"""
AviatorScript IDE Output Module

Run output log and line classification for rendering.
"""

from typing import Callable, Dict, List
from dataclasses import dataclass
from enum import Enum


ERROR_PREFIX = "Error: "
RESULT_PREFIX = "\nResult: "


class OutputKind(str, Enum):
    """How an output line is presented"""
    OUTPUT = "output"
    RESULT = "result"
    ERROR = "error"


def classify_line(line: str) -> OutputKind:
    """Classify purely by prefix; carries no meaning beyond presentation"""
    if line.startswith("Error:"):
        return OutputKind.ERROR
    if line.startswith("\nResult:"):
        return OutputKind.RESULT
    return OutputKind.OUTPUT


@dataclass
class RenderedLine:
    """A line ready for the output pane"""
    text: str
    kind: OutputKind

    def to_dict(self) -> Dict[str, str]:
        return {"text": self.text, "kind": self.kind.value}


def render_line(line: str) -> RenderedLine:
    kind = classify_line(line)
    text = line.strip() if kind == OutputKind.RESULT else line
    return RenderedLine(text=text, kind=kind)


class OutputSink:
    """
    Ordered, append-only log of output lines.

    Reset at the start of every run. Listeners see each append and clear
    in the order they happen.
    """

    def __init__(self):
        self._lines: List[str] = []
        self._append_listeners: List[Callable[[str], None]] = []
        self._clear_listeners: List[Callable[[], None]] = []

    @property
    def lines(self) -> List[str]:
        """Copy of the current lines"""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def append(self, line: str):
        self._lines.append(line)
        for listener in list(self._append_listeners):
            listener(line)

    def clear(self):
        self._lines.clear()
        for listener in list(self._clear_listeners):
            listener()

    def on_append(self, listener: Callable[[str], None]):
        self._append_listeners.append(listener)

    def on_clear(self, listener: Callable[[], None]):
        self._clear_listeners.append(listener)

    def rendered(self) -> List[RenderedLine]:
        return [render_line(line) for line in self._lines]
