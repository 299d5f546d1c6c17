"""
Smoke tests for config / settings loading.
Run: python -m pytest tests/ -v
"""
import sys
import os
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from train_plan.config import get_settings, _is_placeholder


class TestIsPlaceholder:
    def test_empty_string_is_placeholder(self):
        assert _is_placeholder("")

    def test_angle_bracket_is_placeholder(self):
        assert _is_placeholder("<your-gemini-key>")

    def test_your_prefix_is_placeholder(self):
        assert _is_placeholder("your-api-key")

    def test_literal_PLACEHOLDER_is_placeholder(self):
        assert _is_placeholder("PLACEHOLDER")

    def test_real_key_not_placeholder(self):
        assert not _is_placeholder("AIzaSyA1b2C3d4E5f6G7h8")


class TestSettingsLoading:
    def test_defaults(self, monkeypatch):
        for var in ("GEMINI_MODEL", "GEMINI_BASE_URL", "GEMINI_TIMEOUT_SECONDS", "LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        s = get_settings()
        assert s.gemini.model == "gemini-2.0-flash"
        assert s.gemini.base_url == "https://generativelanguage.googleapis.com/v1beta"
        assert s.gemini.timeout_seconds == 60.0
        assert s.app.log_level == "INFO"

    def test_generate_url(self, monkeypatch):
        monkeypatch.setenv("GEMINI_BASE_URL", "https://proxy.test/v1beta/")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-1.5-pro")
        s = get_settings()
        assert s.gemini.generate_url == "https://proxy.test/v1beta/models/gemini-1.5-pro:generateContent"

    def test_force_mock_defaults_false(self, monkeypatch):
        """FORCE_MOCK_MODE should default to False when env var is absent."""
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        assert not get_settings().app.force_mock_mode

    def test_live_mode_false_with_placeholder_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "<your-gemini-key>")
        monkeypatch.delenv("FORCE_MOCK_MODE", raising=False)
        s = get_settings()
        assert not s.gemini.is_configured
        assert not s.live_mode

    def test_live_mode_true_with_real_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyA1b2C3d4E5f6G7h8")
        monkeypatch.setenv("FORCE_MOCK_MODE", "false")
        assert get_settings().live_mode

    def test_force_mock_overrides_real_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "AIzaSyA1b2C3d4E5f6G7h8")
        monkeypatch.setenv("FORCE_MOCK_MODE", "1")
        assert not get_settings().live_mode

    def test_store_paths_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PLAN_STORE_PATH", str(tmp_path / "drafts.db"))
        monkeypatch.setenv("EXPORT_DIR", str(tmp_path / "out"))
        s = get_settings()
        assert s.store.db_path == tmp_path / "drafts.db"
        assert s.store.export_dir == Path(tmp_path / "out")

    def test_status_summary_keys(self):
        summary = get_settings().status_summary()
        assert set(summary) == {"Gemini API", "Mock mode", "Draft store"}
