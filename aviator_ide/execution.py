"""
AviatorScript IDE Execution Module

Run lifecycle for the playground: Idle -> Running -> Idle.

A run clears the output, yields once so the Running state reaches the UI,
then hands the script to the external engine with a capture context. The
engine call is opaque and unbounded; there is no timeout and no way to
cancel it once started.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional
from dataclasses import dataclass, field
from types import MappingProxyType
import asyncio
import time

from loguru import logger

from .engine import OutputFunction, ScriptEngine, error_message
from .models import RunState, stringify
from .output import ERROR_PREFIX, RESULT_PREFIX, OutputSink


OUTPUT_FUNCTIONS = ("print", "println", "p")


class RunInProgressError(RuntimeError):
    """Raised when run() is requested while another run is in flight"""


@dataclass
class RunOutcome:
    """Reduced result of one run"""
    success: bool
    lines: List[str] = field(default_factory=list)
    result: Optional[str] = None
    error: Optional[str] = None
    duration_ms: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "lines": self.lines,
            "result": self.result,
            "error": self.error,
            "duration_ms": round(self.duration_ms, 2),
        }


def build_execution_context(emit: Callable[[str], None]) -> Mapping[str, OutputFunction]:
    """Capture context: every output builtin appends the stringified argument"""

    def capture(value: Any) -> None:
        emit(stringify(value))

    return MappingProxyType({name: capture for name in OUTPUT_FUNCTIONS})


class ExecutionCoordinator:
    """
    Owns the run state machine.

    At most one run is in flight; a second request while Running is
    rejected with RunInProgressError rather than queued.

    With use_worker (the default) the engine runs on a thread pool worker.
    Captured lines travel back to the event loop through call_soon_threadsafe,
    so the sink is only touched on the loop thread and keeps call order.

    If the task awaiting run() is cancelled while the engine is busy, the
    engine call is left to finish on its worker. The coordinator stays
    Running until it does, and lines it emits after the cancellation are
    dropped.
    """

    def __init__(self, engine: ScriptEngine, sink: OutputSink, use_worker: bool = True):
        self.engine = engine
        self.sink = sink
        self.use_worker = use_worker
        self.state = RunState.IDLE
        self._state_listeners: List[Callable[[RunState], None]] = []
        self._capture_token: Optional[object] = None
        self._worker: Optional[asyncio.Future] = None

    @property
    def is_running(self) -> bool:
        return self.state == RunState.RUNNING

    def on_state_change(self, listener: Callable[[RunState], None]):
        self._state_listeners.append(listener)

    def _set_state(self, state: RunState):
        self.state = state
        for listener in list(self._state_listeners):
            listener(state)

    async def run(self, text: str) -> RunOutcome:
        if self.state != RunState.IDLE:
            raise RunInProgressError("A run is already in progress")

        self._set_state(RunState.RUNNING)
        self._capture_token = token = object()
        started = time.perf_counter()
        try:
            self.sink.clear()
            logger.info(f"Run started ({len(text)} chars)")

            # One tick so the Running state is observable before the engine blocks
            await asyncio.sleep(0)

            try:
                value = await self._execute(text, token)
            except Exception as e:
                message = error_message(e)
                logger.warning(f"Run failed: {message}")
                self.sink.append(ERROR_PREFIX + message)
                return RunOutcome(
                    success=False,
                    lines=self.sink.lines,
                    error=message,
                    duration_ms=(time.perf_counter() - started) * 1000,
                )

            result = stringify(value)
            self.sink.append(RESULT_PREFIX + result)
            return RunOutcome(
                success=True,
                lines=self.sink.lines,
                result=result,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
        finally:
            self._capture_token = None
            worker, self._worker = self._worker, None
            if worker is not None and not worker.done():
                logger.warning("Run abandoned while the engine is busy; staying Running until it returns")
                worker.add_done_callback(lambda future: self._settle_abandoned(future, started))
            else:
                self._finish(started)

    def _finish(self, started: float):
        self._set_state(RunState.IDLE)
        logger.info(f"Run finished in {(time.perf_counter() - started) * 1000:.1f}ms")

    def _settle_abandoned(self, future: asyncio.Future, started: float):
        if not future.cancelled() and future.exception() is not None:
            logger.warning(f"Abandoned run failed: {error_message(future.exception())}")
        self._finish(started)

    def _capture(self, token: object, line: str):
        if token is not self._capture_token:
            logger.debug(f"Dropping output from an abandoned run: {line!r}")
            return
        self.sink.append(line)

    async def _execute(self, text: str, token: object) -> Any:
        if not self.use_worker:
            context = build_execution_context(self.sink.append)
            return self.engine.execute(text, context)

        loop = asyncio.get_running_loop()

        def emit(line: str):
            loop.call_soon_threadsafe(self._capture, token, line)

        context = build_execution_context(emit)
        self._worker = loop.run_in_executor(None, self.engine.execute, text, context)
        # Outlives a cancelled caller; run() tracks it until the engine returns
        return await asyncio.shield(self._worker)
