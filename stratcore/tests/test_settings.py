from __future__ import annotations

import pytest

from stratcore.settings import EngineSettings, get_settings, reload_settings


@pytest.fixture
def clean_settings(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("STRATCORE_STATE_DIR", raising=False)
    yield monkeypatch
    get_settings.cache_clear()


def test_settings_read_environment(clean_settings, tmp_path) -> None:
    clean_settings.setenv("LOG_LEVEL", "DEBUG")
    clean_settings.setenv("STRATCORE_STATE_DIR", str(tmp_path))

    settings = reload_settings()
    assert settings.log_level == "DEBUG"
    assert settings.state_dir == tmp_path
    assert get_settings() is settings
    assert settings.risk_store("es").path == tmp_path / "es.json"


def test_no_state_dir_means_no_store(clean_settings) -> None:
    settings = EngineSettings(_env_file=None)
    assert settings.state_dir is None
    assert settings.risk_store("es") is None
