"""
AviatorScript IDE Editor Module

Glue between the editing widget and the analysis coordinator.
"""

from typing import Any, Dict, List, Optional, Protocol
from dataclasses import dataclass
import asyncio

from loguru import logger

from .analysis import AnalysisCoordinator
from .models import Diagnostic, Marker
from .syntax import LANGUAGE_ID, monarch


@dataclass
class SourceDocument:
    """The current text buffer; latest text wins"""
    text: str = ""

    @property
    def line_count(self) -> int:
        return self.text.count('\n') + 1


class EditorWidget(Protocol):
    """What the adapter needs from the editing widget"""

    def register_language(self, language_id: str, grammar: Dict[str, Any]) -> None:
        ...

    def set_markers(self, owner: str, markers: List[Marker]) -> None:
        ...


class EditorAdapter:
    """
    Wraps the editing widget.

    Every change is stamped with a sequence number. When analyses overlap,
    a result only reaches the overlay if it is newer than the last one
    applied, so a slow analysis of old text can't overwrite fresher markers.
    """

    def __init__(
        self,
        widget: EditorWidget,
        analysis: AnalysisCoordinator,
        document: Optional[SourceDocument] = None,
        marker_owner: str = LANGUAGE_ID,
    ):
        self.widget = widget
        self.analysis = analysis
        self.document = document or SourceDocument()
        self.marker_owner = marker_owner
        self.markers: List[Marker] = []

        self._issued = 0
        self._applied = 0

    def mount(self):
        """Register the language, then analyze the starting document"""
        self.widget.register_language(LANGUAGE_ID, monarch())
        seq = self._next_sequence()
        self._settle(seq, self.analysis.analyze(self.document.text))

    def on_change(self, text: str) -> bool:
        """Handle an edit; returns whether new markers were applied"""
        self.document.text = text
        seq = self._next_sequence()
        return self._settle(seq, self.analysis.analyze(text))

    async def on_change_async(self, text: str) -> bool:
        """Like on_change, with the analyzer running off the event loop"""
        self.document.text = text
        seq = self._next_sequence()
        diagnostics = await asyncio.to_thread(self.analysis.analyze, text)
        return self._settle(seq, diagnostics)

    def apply_markers(self, markers: List[Marker]):
        """Replace the widget's diagnostic overlay"""
        self.markers = list(markers)
        self.widget.set_markers(self.marker_owner, self.markers)

    def _next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    def _settle(self, seq: int, diagnostics: Optional[List[Diagnostic]]) -> bool:
        if diagnostics is None:
            # Failed analysis: keep the current overlay
            return False
        if seq <= self._applied:
            logger.debug(f"Discarding stale analysis #{seq} (applied #{self._applied})")
            return False

        self._applied = seq
        self.apply_markers(self.analysis.to_markers(diagnostics))
        return True
