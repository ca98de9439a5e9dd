"""Configuration settings for aido."""

from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_CONFIG_FILE = Path.home() / ".config" / "aido" / "aido.env"


class Settings(BaseSettings):
    """Pydantic settings class for aido."""

    # Loaded from AIDO_* environment variables or the config file (dotenv format)
    LOG_LEVEL: str = "warning"  # Options: debug, info, warning, error, critical
    CONFIG_FILE: Path = DEFAULT_CONFIG_FILE

    # LLM connection
    API_KEY: str = ""
    API_URL: str = "https://api.openai.com/v1"
    MODEL_NAME: str = "gpt-4o-mini"
    TIMEOUT: float = 60.0  # seconds
    TEMPERATURE: float = 0.7

    # Agent loop
    MAX_ITERATIONS: int | None = None  # None: no bound

    class Config:
        """Configuration for Pydantic settings."""

        env_prefix = "AIDO_"
        env_file_encoding = "utf-8"


def load_settings(config_file: str | Path | None = None) -> Settings:
    """
    Load settings from the environment and, if it exists, the config file.

    *config_file* overrides ``AIDO_CONFIG_FILE`` and the default location.
    """
    path = Path(config_file or Settings().CONFIG_FILE).expanduser()
    if path.is_file():
        return Settings(_env_file=path, CONFIG_FILE=path)
    return Settings(CONFIG_FILE=path)
