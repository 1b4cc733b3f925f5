"""Application settings loader from YAML configuration."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from finn.utils.exceptions import ConfigError
from finn.utils.logger import finn_home

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "resources" / "config.yaml"


@dataclass
class AppSettings:
    """Application-wide settings loaded from config.yaml."""

    # App info
    app_name: str
    app_version: str

    # Logging
    log_level: str
    log_max_file_size_mb: int
    log_backup_count: int

    # LLM
    llm_model_name: str
    llm_max_retries: int
    llm_backoff_factor: float
    llm_json_mode: bool

    # Analysis
    analysis_max_workers: int
    top_merchants: int
    use_llm: bool

    # Vendor cache
    vendor_cache_fuzzy_threshold: int

    # Paths (relative entries resolve against FINN_HOME)
    home_dir: Path
    profiles_dir: Path
    vendors_dir: Path
    logs_dir: Path

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "AppSettings":
        """Load settings from YAML file."""
        if config_path is None:
            env_path = os.getenv("FINN_CONFIG")
            config_path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        home = finn_home()

        try:
            return cls(
                app_name=config["app"]["name"],
                app_version=str(config["app"]["version"]),
                log_level=config["logging"]["level"],
                log_max_file_size_mb=config["logging"]["max_file_size_mb"],
                log_backup_count=config["logging"]["backup_count"],
                llm_model_name=config["llm"]["model_name"],
                llm_max_retries=config["llm"]["max_retries"],
                llm_backoff_factor=config["llm"]["backoff_factor"],
                llm_json_mode=config["llm"]["json_mode"],
                analysis_max_workers=config["analysis"]["max_workers"],
                top_merchants=config["analysis"]["top_merchants"],
                use_llm=config["analysis"]["use_llm"],
                vendor_cache_fuzzy_threshold=config["vendor_cache"]["fuzzy_match_threshold"],
                home_dir=home,
                profiles_dir=home / config["paths"]["profiles_dir"],
                vendors_dir=home / config["paths"]["vendors_dir"],
                logs_dir=home / config["paths"]["logs_dir"]
            )
        except (KeyError, TypeError) as e:
            raise ConfigError(f"Invalid settings file {config_path}: missing {e}")


# Global settings instance
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings.load()
    return _settings
