"""
config.py — Central settings for the Training Plan Generator
=============================================================
All configuration is loaded from environment variables / .env file.
Copy .env.example → .env and fill in your values.

Live mode activates automatically when GEMINI_API_KEY contains a real
(non-placeholder) value and FORCE_MOCK_MODE is not set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env into os.environ (no-op if already set, safe to call multiple times)
load_dotenv(override=False)

# Workspace root (…/src/train_plan/config.py → …/)
_ROOT_DIR = Path(__file__).resolve().parent.parent.parent


# ─── Helpers ────────────────────────────────────────────────────────────────

def _is_placeholder(value: str) -> bool:
    """Return True if the value looks like an unfilled template placeholder."""
    return not value or "<" in value or value.startswith("your-") or value == "PLACEHOLDER"


# ─── Gemini (generative text provider) ──────────────────────────────────────

@dataclass(frozen=True)
class GeminiConfig:
    api_key:         str
    model:           str
    base_url:        str
    timeout_seconds: float

    @property
    def is_configured(self) -> bool:
        """True when the API key is a real (non-placeholder) value."""
        return bool(self.api_key) and not _is_placeholder(self.api_key)

    @property
    def generate_url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"


# ─── Local draft slot + export target ───────────────────────────────────────

@dataclass(frozen=True)
class StoreConfig:
    db_path:    Path
    export_dir: Path


# ─── App-level settings ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class AppConfig:
    force_mock_mode: bool
    log_level:       str


# ─── Master settings object ──────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    gemini: GeminiConfig
    store:  StoreConfig
    app:    AppConfig

    @property
    def live_mode(self) -> bool:
        """True when the Gemini key is real and FORCE_MOCK_MODE is false."""
        return self.gemini.is_configured and not self.app.force_mock_mode

    def status_summary(self) -> dict[str, str]:
        """Return a dict of service → status badge for the UI."""
        def badge(ok: bool) -> str:
            return "🟢 Live" if ok else "⚪ Not configured"

        return {
            "Gemini API":  badge(self.gemini.is_configured),
            "Mock mode":   "🧪 On" if self.app.force_mock_mode else "Off",
            "Draft store": str(self.store.db_path.name),
        }


def get_settings() -> Settings:
    """Load all configuration from environment variables."""
    _str   = lambda k, d="": os.getenv(k, d).strip()
    _float = lambda k, d=0.0: float(os.getenv(k, str(d)) or d)
    _bool  = lambda k, d=False: os.getenv(k, str(d)).lower() in ("1", "true", "yes")

    return Settings(
        gemini=GeminiConfig(
            api_key         = _str("GEMINI_API_KEY"),
            model           = _str("GEMINI_MODEL", "gemini-2.0-flash"),
            base_url        = _str("GEMINI_BASE_URL",
                                   "https://generativelanguage.googleapis.com/v1beta").rstrip("/"),
            timeout_seconds = _float("GEMINI_TIMEOUT_SECONDS", 60.0),
        ),
        store=StoreConfig(
            db_path    = Path(_str("PLAN_STORE_PATH", str(_ROOT_DIR / "train_plan_data.db"))),
            export_dir = Path(_str("EXPORT_DIR", ".")),
        ),
        app=AppConfig(
            force_mock_mode = _bool("FORCE_MOCK_MODE", False),
            log_level       = _str("LOG_LEVEL", "INFO").upper(),
        ),
    )
