"""
AviatorScript Playground IDE
============================

Orchestration core for the browser playground: live static analysis
feeding editor markers, and a Run action with captured output.

Components:
- Editor Adapter: Grammar registration, change events, marker overlay
- Analysis Coordinator: Analyzer calls and diagnostic translation
- Execution Coordinator: Run lifecycle and output capture
- Output Sink: Append-only log of run output

Architecture:
    [Edit] → [Editor Adapter] → [Analysis Coordinator] → [Markers]
    [Run]  → [Execution Coordinator] → [Engine + Capture Context] → [Output Sink]
"""

from .analysis import AnalysisCoordinator
from .editor import EditorAdapter, EditorWidget, SourceDocument
from .engine import EngineError, ScriptEngine, StaticAnalyzer
from .execution import ExecutionCoordinator, RunInProgressError, RunOutcome, build_execution_context
from .models import Diagnostic, Marker, RunState, Severity, severity_from_code, MARKER_END_COLUMN
from .output import OutputKind, OutputSink, classify_line, render_line
from .session import PlaygroundSession, WELCOME_SCRIPT
from .syntax import AviatorTokenizer, TokenType, AVIATOR_GRAMMAR, LANGUAGE_ID

__version__ = "0.3.3"
__all__ = [
    "AnalysisCoordinator",
    "EditorAdapter",
    "EditorWidget",
    "SourceDocument",
    "EngineError",
    "ScriptEngine",
    "StaticAnalyzer",
    "ExecutionCoordinator",
    "RunInProgressError",
    "RunOutcome",
    "build_execution_context",
    "Diagnostic",
    "Marker",
    "RunState",
    "Severity",
    "severity_from_code",
    "MARKER_END_COLUMN",
    "OutputKind",
    "OutputSink",
    "classify_line",
    "render_line",
    "PlaygroundSession",
    "WELCOME_SCRIPT",
    "AviatorTokenizer",
    "TokenType",
    "AVIATOR_GRAMMAR",
    "LANGUAGE_ID",
]
