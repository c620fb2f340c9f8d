"""
Static analysis feedback for the AviatorScript editor.

Runs the external analyzer on every change and turns its diagnostics into
editor markers. Analysis must never break editing: any failure is logged
and absorbed, and the caller keeps whatever markers it already shows.
"""

from typing import List, Optional

from loguru import logger

from .engine import StaticAnalyzer
from .models import Diagnostic, Marker, MARKER_END_COLUMN


class AnalysisCoordinator:
    """Invokes the analyzer and translates its output"""

    def __init__(self, analyzer: StaticAnalyzer, end_column: int = MARKER_END_COLUMN):
        self.analyzer = analyzer
        self.end_column = end_column

    def analyze(self, text: str) -> Optional[List[Diagnostic]]:
        """
        Analyze a document snapshot.

        Returns:
            The diagnostics (possibly empty), or None when the analyzer failed.
            Never raises.
        """
        try:
            raw_items = self.analyzer.analyze(text)
            diagnostics = [Diagnostic.from_raw(item) for item in raw_items]
        except Exception:
            logger.exception("Analysis failed")
            return None

        logger.debug(f"Analysis produced {len(diagnostics)} diagnostic(s)")
        return diagnostics

    def to_markers(self, diagnostics: List[Diagnostic]) -> List[Marker]:
        return [Marker.from_diagnostic(d, self.end_column) for d in diagnostics]
