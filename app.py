"""
AviatorScript Playground - browser editor with live analysis and a Run action
FastAPI application serving the page, REST endpoints and a WebSocket channel
"""
import asyncio
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from loguru import logger

from aviator_ide import __version__, PlaygroundSession, RunInProgressError, LANGUAGE_ID
from aviator_ide.syntax import AviatorTokenizer, monarch
from config import settings
from runtime_bridge import runtime_bridge


_session: Optional[PlaygroundSession] = None
tokenizer = AviatorTokenizer()


def get_session() -> PlaygroundSession:
    """Get or create the process-wide playground session"""
    global _session
    if _session is None:
        _session = PlaygroundSession(
            analyzer=runtime_bridge,
            engine=runtime_bridge,
            use_worker=settings.run_in_worker,
            end_column=settings.marker_end_column,
            marker_owner=settings.marker_owner,
        )
        _session.mount()
    return _session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"AviatorScript Playground v{__version__} starting (runtime: {settings.runtime_url})")
    yield
    logger.info("AviatorScript Playground shutting down...")
    runtime_bridge.close()


app = FastAPI(
    title="aviator-playground",
    description="Browser playground for AviatorScript with live static analysis",
    version=__version__,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Pydantic Models ---

class AnalyzeRequest(BaseModel):
    text: str

class RunRequest(BaseModel):
    text: Optional[str] = None

class HighlightRequest(BaseModel):
    text: Optional[str] = None


# --- Page ---

PLAYGROUND_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>AviatorScript Playground</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #1e1e1e;
            color: #e8e8e8;
            height: 100vh;
            display: flex;
            flex-direction: column;
        }
        .header {
            display: flex;
            justify-content: space-between;
            align-items: center;
            padding: 0.75rem 1.5rem;
            border-bottom: 1px solid #333;
        }
        .version-badge { font-size: 0.8rem; color: #888; margin-left: 1rem; }
        .main-container { flex: 1; display: flex; min-height: 0; }
        .editor-container { flex: 3; display: flex; flex-direction: column; }
        .toolbar { display: flex; align-items: center; padding: 0.5rem; gap: 0.5rem; }
        .toolbar span { font-size: 0.8rem; color: #666; margin-left: auto; }
        #editor { flex: 1; }
        button {
            padding: 0.4rem 1rem;
            background: #0e639c;
            color: #fff;
            border: none;
            border-radius: 4px;
            cursor: pointer;
        }
        button:disabled { background: #444; cursor: default; }
        .output-container {
            flex: 2;
            padding: 1rem;
            border-left: 1px solid #333;
            overflow: auto;
            font-family: monospace;
            white-space: pre-wrap;
        }
        .output-title { color: #888; border-bottom: 1px solid #333; padding-bottom: 0.5rem; margin-bottom: 1rem; }
        .output-empty { color: #555; }
        .output-error { color: #f48771; }
        .output-result { color: #89d185; }
    </style>
</head>
<body>
    <header class="header">
        <div><strong>AviatorScript Playground</strong><span class="version-badge">v__VERSION__</span></div>
    </header>
    <main class="main-container">
        <div class="editor-container">
            <div class="toolbar">
                <button id="run">&#9654; Run</button>
                <span>Changes are statically analyzed in real-time</span>
            </div>
            <div id="editor"></div>
        </div>
        <div class="output-container">
            <div class="output-title">Output</div>
            <div id="output"><span class="output-empty">Run the code to see output...</span></div>
        </div>
    </main>

    <script src="https://cdn.jsdelivr.net/npm/monaco-editor@0.45.0/min/vs/loader.js"></script>
    <script>
        const runButton = document.getElementById('run');
        const outputEl = document.getElementById('output');
        const ws = new WebSocket(`${location.protocol === 'https:' ? 'wss' : 'ws'}://${location.host}/ws/playground`);
        let editor = null;

        function clearOutput() {
            outputEl.innerHTML = '<span class="output-empty">Run the code to see output...</span>';
        }

        function appendOutput(line) {
            if (outputEl.querySelector('.output-empty')) outputEl.innerHTML = '';
            const div = document.createElement('div');
            div.textContent = line.text;
            if (line.kind !== 'output') div.className = 'output-' + line.kind;
            outputEl.appendChild(div);
        }

        function setMarkers(markers) {
            if (editor) monaco.editor.setModelMarkers(editor.getModel(), '__OWNER__', markers);
        }

        require.config({ paths: { vs: 'https://cdn.jsdelivr.net/npm/monaco-editor@0.45.0/min/vs' } });
        require(['vs/editor/editor.main'], async () => {
            const grammar = await (await fetch('/api/grammar')).json();
            monaco.languages.register({ id: grammar.id });
            monaco.languages.setMonarchTokensProvider(grammar.id, {
                tokenizer: {
                    root: grammar.grammar.tokenizer.root.map(([pattern, token]) => [new RegExp(pattern), token])
                }
            });
            const state = await (await fetch('/api/state')).json();
            editor = monaco.editor.create(document.getElementById('editor'), {
                value: state.text,
                language: grammar.id,
                theme: 'vs-dark',
                minimap: { enabled: false },
                fontSize: 14,
                scrollBeyondLastLine: false,
                automaticLayout: true,
                fixedOverflowWidgets: true,
            });
            setMarkers(state.markers);
            editor.onDidChangeModelContent(() => {
                ws.send(JSON.stringify({ type: 'change', text: editor.getValue() }));
            });
        });

        runButton.onclick = () => ws.send(JSON.stringify({ type: 'run' }));

        ws.onmessage = (msg) => {
            const event = JSON.parse(msg.data);
            if (event.type === 'snapshot') {
                runButton.disabled = event.state === 'running';
                clearOutput();
                event.output.forEach(appendOutput);
            } else if (event.type === 'state') {
                runButton.disabled = event.state === 'running';
            } else if (event.type === 'output_cleared') {
                clearOutput();
            } else if (event.type === 'output') {
                appendOutput(event);
            } else if (event.type === 'markers') {
                setMarkers(event.markers);
            }
        };
    </script>
</body>
</html>
"""


@app.get("/", response_class=HTMLResponse)
async def root():
    """Serve the playground page"""
    return (PLAYGROUND_HTML
            .replace("__VERSION__", __version__)
            .replace("__OWNER__", settings.marker_owner))


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "aviator-playground",
        "version": __version__,
        "runtime_url": settings.runtime_url
    }


# --- API Endpoints ---

@app.get("/api/grammar")
async def grammar():
    """Language id and tokenizer rules for the editor widget"""
    return {"id": LANGUAGE_ID, "grammar": monarch()}


@app.post("/api/highlight")
async def highlight(request: HighlightRequest, session: PlaygroundSession = Depends(get_session)):
    """
    Tokenize the given text, or the current document, line by line
    """
    text = session.document.text if request.text is None else request.text
    return {
        "language": LANGUAGE_ID,
        "lines": [[token.to_dict() for token in line] for line in tokenizer.tokenize_code(text)]
    }


@app.get("/api/state")
async def state(session: PlaygroundSession = Depends(get_session)):
    """Current document, markers, run state and output"""
    return session.snapshot()


@app.post("/api/analyze")
async def analyze(request: AnalyzeRequest, session: PlaygroundSession = Depends(get_session)):
    """
    Update the document and analyze it
    """
    applied = await session.change(request.text)
    return {
        "applied": applied,
        "markers": [m.to_monaco() for m in session.editor.markers]
    }


@app.post("/api/run")
async def run(request: RunRequest, session: PlaygroundSession = Depends(get_session)):
    """
    Run the given text, or the current document
    """
    try:
        outcome = await session.run(request.text)
    except RunInProgressError as e:
        logger.warning(f"Run rejected: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    return {
        **outcome.to_dict(),
        "output": [line.to_dict() for line in session.sink.rendered()]
    }


async def _run_for_socket(session: PlaygroundSession, websocket: WebSocket):
    try:
        await session.run()
    except RunInProgressError as e:
        logger.warning(f"Run rejected: {e}")
        try:
            await websocket.send_json({"type": "rejected", "reason": str(e)})
        except (WebSocketDisconnect, RuntimeError) as send_error:
            logger.debug(f"Could not deliver rejection: {send_error}")


@app.websocket("/ws/playground")
async def websocket_playground(
    websocket: WebSocket,
    session: PlaygroundSession = Depends(get_session)
):
    """
    WebSocket channel: edits and run requests in, session events out
    """
    await websocket.accept()
    logger.info("WebSocket connection established")

    queue = session.subscribe()
    await websocket.send_json({"type": "snapshot", **session.snapshot()})

    async def forward_events():
        while True:
            event = await queue.get()
            await websocket.send_json(event)

    sender = asyncio.create_task(forward_events())
    runs = set()

    try:
        while True:
            message = await websocket.receive_json()
            kind = message.get("type")

            if kind == "change":
                await session.change(message.get("text", ""))
            elif kind == "run":
                task = asyncio.create_task(_run_for_socket(session, websocket))
                runs.add(task)
                task.add_done_callback(runs.discard)
            else:
                await websocket.send_json({"type": "error", "detail": f"Unknown message type: {kind}"})

    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
        await websocket.close()
    finally:
        sender.cancel()
        session.unsubscribe(queue)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level
    )
