"""User configuration manager."""
import json
import os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, Tuple

from finn.utils.exceptions import ConfigError
from finn.utils.logger import finn_home


@dataclass
class Config:
    """User configuration."""
    gemini_api_key: Optional[str] = None
    log_level: str = "INFO"
    use_llm: bool = True
    profile_id: str = "default"


class ConfigManager:
    """Loads and saves ``config.json`` under the Finn home directory."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or finn_home()
        self.config_file = self.config_dir / "config.json"

    def load_config(self) -> Config:
        """
        Load configuration, overlaying ``GEMINI_API_KEY`` from the environment.

        Returns:
            Config object (defaults when no file exists)
        """
        config = Config()

        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Failed to load configuration: {e}")

            known = {f.name for f in fields(Config)}
            config = Config(**{k: v for k, v in data.items() if k in known})

        env_key = os.getenv("GEMINI_API_KEY")
        if env_key:
            config.gemini_api_key = env_key

        return config

    def save_config(self, config: Config) -> None:
        """Save configuration to disk."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(asdict(config), f, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}")

    def validate_config(self, config: Config) -> Tuple[bool, str]:
        """Validate configuration values."""
        if config.use_llm and not config.gemini_api_key:
            return False, "Gemini API key is required when LLM analysis is enabled"

        if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            return False, f"Unknown log level: {config.log_level}"

        if not config.profile_id or not config.profile_id.strip():
            return False, "Profile ID is required"

        return True, "Configuration is valid"
