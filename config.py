"""
AviatorScript Playground configuration
"""
from pydantic_settings import BaseSettings
from typing import Literal

class Settings(BaseSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = 8300
    debug: bool = False
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = "info"

    # External AviatorScript runtime (analyzer + engine)
    runtime_url: str = "http://localhost:8310"
    runtime_timeout: float = 30.0

    # Editor markers
    marker_owner: str = "aviator"
    marker_end_column: int = 1000  # spans the full line

    # Execution
    run_in_worker: bool = True  # engine runs off the event loop

    class Config:
        env_file = ".env"
        env_prefix = "AVIATOR_PLAYGROUND_"

settings = Settings()
