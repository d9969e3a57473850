import os
from pathlib import Path
from typing import List, Optional

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent


def _as_float(val: str | None, default: Optional[float]) -> Optional[float]:
    if val is None or val.strip() == "":
        return default
    return float(val)


def _as_list(val: str | None, default: List[str]) -> List[str]:
    if val is None:
        return default
    return [item.strip() for item in val.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        self.OVERPASS_INTERPRETER_URL: str = os.getenv(
            "OVERPASS_INTERPRETER_URL", "https://overpass-api.de/api/interpreter"
        )
        # Server-side processing limit embedded in the query text itself.
        self.OVERPASS_QUERY_TIMEOUT_SECONDS: int = int(os.getenv("OVERPASS_QUERY_TIMEOUT_SECONDS", "30"))
        # None means requests waits as long as the transport allows.
        self.OVERPASS_HTTP_TIMEOUT_SECONDS: Optional[float] = _as_float(
            os.getenv("OVERPASS_HTTP_TIMEOUT_SECONDS"), None
        )
        self.OVERPASS_USER_AGENT: Optional[str] = os.getenv("OVERPASS_USER_AGENT")
        self.OSM_BASE_URL: str = os.getenv("OSM_BASE_URL", "https://www.openstreetmap.org").rstrip("/")
        self.SYNC_DEBOUNCE_SECONDS: float = _as_float(os.getenv("SYNC_DEBOUNCE_SECONDS"), 1.0)
        self.CHAT_RULES_PATH: Path = Path(
            os.getenv("CHAT_RULES_PATH", str(BACKEND_ROOT / "services" / "data" / "chatbot_rules.json"))
        )
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.CORS_ALLOW_ORIGINS: List[str] = _as_list(os.getenv("CORS_ALLOW_ORIGINS"), ["*"])


settings = Settings()
