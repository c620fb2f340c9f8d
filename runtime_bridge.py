"""
AviatorScript Playground Runtime Bridge
Reaches the external AviatorScript analyzer and engine over HTTP
"""
import httpx
from typing import Any, Dict, List, Mapping, Optional
from loguru import logger

from config import settings
from aviator_ide.engine import EngineError, OutputFunction


class RuntimeBridge:
    """
    Client for an AviatorScript runtime service.

    Implements both the StaticAnalyzer and ScriptEngine shapes. Calls are
    synchronous; the execution coordinator runs them on a worker thread.
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or settings.runtime_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.runtime_timeout
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client"""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            )
        return self._client

    def close(self):
        """Close HTTP client"""
        if self._client:
            self._client.close()
            self._client = None

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._get_client().post(path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise EngineError(f"Runtime returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise EngineError(f"Runtime unavailable: {e}") from e
        except ValueError as e:
            raise EngineError("Runtime returned invalid JSON") from e

    def analyze(self, text: str) -> List[Dict[str, Any]]:
        """
        Statically analyze source

        Args:
            text: AviatorScript source

        Returns:
            Raw diagnostics: dicts with line, message, severity
        """
        data = self._post("/analyze", {"source": text})
        return data.get("diagnostics", [])

    def execute(self, text: str, context: Mapping[str, OutputFunction]) -> Any:
        """
        Execute source on the runtime

        Output the runtime collected is replayed through the capture
        context, in order, before the result is returned or the error raised.

        Args:
            text: AviatorScript source
            context: Output builtins (print, println, p)

        Returns:
            Value of the script
        """
        data = self._post("/execute", {"source": text})

        emit = context["p"]
        for line in data.get("output", []):
            emit(line)

        if data.get("error") is not None:
            logger.debug(f"Runtime reported error: {data['error']}")
            raise EngineError(str(data["error"]))

        return data.get("result")


# Singleton instance
runtime_bridge = RuntimeBridge()
