"""
AviatorScript runtime boundary.

The analyzer and the execution engine are external collaborators; the IDE
only depends on the shapes declared here.
"""

from typing import Any, Callable, Iterable, Mapping, Protocol


OutputFunction = Callable[[Any], None]


class EngineError(Exception):
    """Failure raised by the execution engine, carrying a readable message"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StaticAnalyzer(Protocol):
    def analyze(self, text: str) -> Iterable[Any]:
        """Return raw diagnostics: items with line, message and an integer severity"""
        ...


class ScriptEngine(Protocol):
    def execute(self, text: str, context: Mapping[str, OutputFunction]) -> Any:
        """Run text, calling context functions for output; return the final value"""
        ...


def error_message(error: BaseException) -> str:
    """Human-readable message of an engine failure"""
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or type(error).__name__
