"""Application settings."""

import os
import json
import logging
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.json"


def get_app_data_dir() -> Path:
    """Directory holding global memory and saved configuration."""
    return Path(os.environ.get("PROTOTYPE_AGENT_HOME") or os.getcwd())


def _config_path(app_data_dir: Optional[Path] = None) -> Path:
    return Path(app_data_dir or get_app_data_dir()) / CONFIG_FILE


def _read_config(app_data_dir: Optional[Path] = None) -> dict:
    path = _config_path(app_data_dir)
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return {}


def get_saved_api_key(app_data_dir: Optional[Path] = None) -> Optional[str]:
    """Return the API key saved in config.json, if any."""
    return _read_config(app_data_dir).get("apiKey")


def save_api_key(api_key: str, app_data_dir: Optional[Path] = None):
    """Persist an API key, keeping any other config entries."""
    path = _config_path(app_data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    config = _read_config(app_data_dir)
    config["apiKey"] = api_key
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")


def clear_saved_api_key(app_data_dir: Optional[Path] = None):
    """Remove the saved API key from config.json."""
    config = _read_config(app_data_dir)
    if "apiKey" not in config:
        return
    del config["apiKey"]
    _config_path(app_data_dir).write_text(json.dumps(config, indent=2), encoding="utf-8")


def mask_api_key(api_key: str) -> str:
    """Mask an API key for display: first 7 and last 4 characters."""
    if len(api_key) <= 12:
        return "****"
    return f"{api_key[:7]}...{api_key[-4:]}"


class Settings(BaseModel):
    """Application configuration settings."""

    # LLM Provider settings
    llm_provider: str = "anthropic"  # "anthropic" or "openai"
    llm_model: Optional[str] = None  # Override default model
    max_tokens: int = 8192
    temperature: float = 0.7

    # API Keys
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None

    # Storage
    app_data_dir: Optional[str] = None
    prototypes_dir_name: str = "prototypes"

    # Agent loop
    default_mode: str = "rapid-prototype"
    max_iterations: int = 10
    summarize_after_turns: int = 10
    max_persisted_turns: int = 50

    # Logging
    verbose: bool = False

    def __init__(self, **data):
        # Auto-load API keys from environment if not provided
        if "anthropic_api_key" not in data or data["anthropic_api_key"] is None:
            data["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")

        if "openai_api_key" not in data or data["openai_api_key"] is None:
            data["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

        if "app_data_dir" not in data or data["app_data_dir"] is None:
            data["app_data_dir"] = str(get_app_data_dir())

        super().__init__(**data)

    @property
    def data_dir(self) -> Path:
        return Path(self.app_data_dir)

    def get_llm_api_key(self) -> Optional[str]:
        """Get the API key for the configured LLM provider."""
        if self.llm_provider == "anthropic":
            return self.anthropic_api_key or get_saved_api_key(self.data_dir)
        elif self.llm_provider == "openai":
            return self.openai_api_key
        return None
