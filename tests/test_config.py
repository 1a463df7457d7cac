"""Tests for settings loading."""

from spatial_voice.config import Settings


def test_defaults_without_key(monkeypatch, tmp_path):
    monkeypatch.delenv("DEEPSEEK_API_KEY", raising=False)
    settings = Settings(_env_file=None, project_root=tmp_path)
    assert settings.deepseek_api_key is None
    assert settings.scoring_base_url == "https://api.deepseek.com"
    assert settings.scoring_model == "deepseek-chat"
    assert settings.scoring_max_tokens == 800
    assert settings.scoring_temperature == 0.4
    assert settings.transport_retries == 0
    assert settings.scenario_title == "Class Presentation"
    assert settings.max_live_sessions == 200


def test_key_from_environment(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-from-env")
    settings = Settings(_env_file=None)
    assert settings.deepseek_api_key == "sk-from-env"


def test_environment_overrides_yaml(monkeypatch):
    monkeypatch.setenv("TRANSPORT_RETRIES", "3")
    monkeypatch.setenv("SCORING_MODEL", "deepseek-reasoner")
    settings = Settings(_env_file=None)
    assert settings.transport_retries == 3
    assert settings.scoring_model == "deepseek-reasoner"


def test_init_overrides_environment(monkeypatch):
    monkeypatch.setenv("SCORING_TEMPERATURE", "0.9")
    settings = Settings(_env_file=None, scoring_temperature=0.1)
    assert settings.scoring_temperature == 0.1


def test_history_dir_created(tmp_path):
    settings = Settings(_env_file=None, project_root=tmp_path)
    assert settings.history_dir == tmp_path / "data" / "history"
    assert settings.history_dir.is_dir()
