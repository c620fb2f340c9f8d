"""
AviatorScript IDE Session

The application-state record: document, markers, output log and run state,
with the analyzer and engine passed in rather than reached through globals.
Interested parties (WebSocket clients) subscribe to an event queue.
"""

from typing import Any, Dict, List, Optional
import asyncio

from loguru import logger

from .analysis import AnalysisCoordinator
from .editor import EditorAdapter, SourceDocument
from .engine import ScriptEngine, StaticAnalyzer
from .execution import ExecutionCoordinator, RunOutcome
from .models import Marker, RunState, MARKER_END_COLUMN
from .output import OutputSink, render_line
from .syntax import LANGUAGE_ID


WELCOME_SCRIPT = '''## Welcome to AviatorScript Playground
## Edit on the left, press Run to execute

let a = 1;
let b = 2;
p("Hello, World!");
p("a + b = " + (a + b));

## Try defining a function
fn add(x, y) {
  return x + y;
}

p("Function call result: " + add(10, 20));

## Try some loop
for i in range(0, 5) {
  p("Loop " + i);
}
'''


class BroadcastWidget:
    """Editor widget that forwards registrations and markers to subscribers"""

    def __init__(self, session: 'PlaygroundSession'):
        self.session = session
        self.language_id: Optional[str] = None
        self.grammar: Optional[Dict[str, Any]] = None

    def register_language(self, language_id: str, grammar: Dict[str, Any]) -> None:
        self.language_id = language_id
        self.grammar = grammar
        self.session.publish({"type": "language", "id": language_id, "grammar": grammar})

    def set_markers(self, owner: str, markers: List[Marker]) -> None:
        self.session.publish({
            "type": "markers",
            "owner": owner,
            "markers": [m.to_monaco() for m in markers],
        })


class PlaygroundSession:
    """Single owner of all playground state"""

    def __init__(
        self,
        analyzer: StaticAnalyzer,
        engine: ScriptEngine,
        initial_text: str = WELCOME_SCRIPT,
        use_worker: bool = True,
        end_column: int = MARKER_END_COLUMN,
        marker_owner: str = LANGUAGE_ID,
    ):
        self.document = SourceDocument(initial_text)
        self.sink = OutputSink()
        self.widget = BroadcastWidget(self)
        self.analysis = AnalysisCoordinator(analyzer, end_column=end_column)
        self.editor = EditorAdapter(self.widget, self.analysis, self.document, marker_owner)
        self.execution = ExecutionCoordinator(engine, self.sink, use_worker=use_worker)

        self._subscribers: List[asyncio.Queue] = []

        self.sink.on_append(lambda line: self.publish({"type": "output", **render_line(line).to_dict()}))
        self.sink.on_clear(lambda: self.publish({"type": "output_cleared"}))
        self.execution.on_state_change(lambda state: self.publish({"type": "state", "state": state.value}))

    @property
    def state(self) -> RunState:
        return self.execution.state

    def mount(self):
        self.editor.mount()

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        logger.debug(f"Subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue):
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def publish(self, event: Dict[str, Any]):
        for queue in list(self._subscribers):
            queue.put_nowait(event)

    async def change(self, text: str) -> bool:
        return await self.editor.on_change_async(text)

    async def run(self, text: Optional[str] = None) -> RunOutcome:
        """Run the given text, or the current document"""
        return await self.execution.run(self.document.text if text is None else text)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "language": LANGUAGE_ID,
            "text": self.document.text,
            "line_count": self.document.line_count,
            "state": self.state.value,
            "markers": [m.to_monaco() for m in self.editor.markers],
            "output": [line.to_dict() for line in self.sink.rendered()],
        }
