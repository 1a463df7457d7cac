"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    # No pyproject.toml above us: fall back to the root of the src/ layout
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'scoring' in data:
            scoring = data['scoring']
            flattened['scoring_base_url'] = scoring.get('base_url')
            flattened['scoring_model'] = scoring.get('model')
            flattened['scoring_max_tokens'] = scoring.get('max_tokens')
            flattened['scoring_temperature'] = scoring.get('temperature')
            flattened['scoring_timeout_seconds'] = scoring.get('timeout_seconds')
            flattened['transport_retries'] = scoring.get('transport_retries')
            flattened['retry_backoff_seconds'] = scoring.get('retry_backoff_seconds')
        if 'practice' in data:
            flattened['scenario_title'] = data['practice'].get('scenario_title')
            flattened['default_duration_minutes'] = (
                data['practice'].get('default_duration_minutes')
            )
            flattened['max_live_sessions'] = data['practice'].get('max_live_sessions')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Scoring service (DeepSeek, OpenAI-compatible). The key is never defaulted.
    deepseek_api_key: str | None = Field(default=None, description="DeepSeek API key")
    scoring_base_url: str = Field(default="https://api.deepseek.com")
    scoring_model: str = Field(default="deepseek-chat")
    scoring_max_tokens: int = Field(default=800)
    scoring_temperature: float = Field(default=0.4)
    scoring_timeout_seconds: float = Field(default=60.0)
    transport_retries: int = Field(default=0, ge=0)
    retry_backoff_seconds: float = Field(default=1.0, ge=0.0)

    # Practice
    scenario_title: str = Field(default="Class Presentation")
    default_duration_minutes: int = Field(default=5, ge=1)
    max_live_sessions: int = Field(default=200, ge=1)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def history_dir(self) -> Path:
        d = self.project_root / "data" / "history"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
