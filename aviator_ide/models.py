"""
AviatorScript IDE Data Model

Diagnostics, editor markers and run state shared by the coordinators.
"""

from typing import Any, Dict, Mapping
from dataclasses import dataclass
from enum import Enum


# Markers span the whole line regardless of its real length
MARKER_END_COLUMN = 1000


class Severity(str, Enum):
    """Diagnostic severity"""
    ERROR = "error"
    WARNING = "warning"

    @property
    def monaco(self) -> int:
        """Monaco MarkerSeverity value"""
        return 8 if self is Severity.ERROR else 4


def severity_from_code(code: int) -> Severity:
    """Analyzer severity code 1 is an error, anything else a warning"""
    return Severity.ERROR if code == 1 else Severity.WARNING


class RunState(str, Enum):
    """Execution lifecycle state"""
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class Diagnostic:
    """A single issue reported by the static analyzer"""
    line: int
    message: str
    severity: Severity

    @classmethod
    def from_raw(cls, raw: Any) -> 'Diagnostic':
        """
        Build from an analyzer item.

        Accepts either a mapping or an object exposing line/message/severity.
        """
        if isinstance(raw, Mapping):
            line, message, code = raw["line"], raw["message"], raw["severity"]
        else:
            line, message, code = raw.line, raw.message, raw.severity

        number = int(line)
        if isinstance(line, bool) or (not isinstance(line, str) and number != line):
            raise ValueError(f"Diagnostic line must be an integer, got {line!r}")
        line = number
        if line < 1:
            raise ValueError(f"Diagnostic line must be >= 1, got {line}")

        return cls(line=line, message=str(message), severity=severity_from_code(int(code)))


@dataclass(frozen=True)
class Marker:
    """Editor overlay projection of a Diagnostic"""
    start_line: int
    end_line: int
    start_column: int
    end_column: int
    message: str
    severity: Severity

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic, end_column: int = MARKER_END_COLUMN) -> 'Marker':
        return cls(
            start_line=diagnostic.line,
            end_line=diagnostic.line,
            start_column=1,
            end_column=end_column,
            message=diagnostic.message,
            severity=diagnostic.severity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "start_column": self.start_column,
            "end_column": self.end_column,
            "message": self.message,
            "severity": self.severity.value,
        }

    def to_monaco(self) -> Dict[str, Any]:
        """Serialize with the keys monaco.editor.setModelMarkers expects"""
        return {
            "startLineNumber": self.start_line,
            "endLineNumber": self.end_line,
            "startColumn": self.start_column,
            "endColumn": self.end_column,
            "message": self.message,
            "severity": self.severity.monaco,
        }


def stringify(value: Any) -> str:
    """String form of a script value, as AviatorScript prints it"""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
