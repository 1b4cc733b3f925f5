"""Logging infrastructure with profile context."""
import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Optional


def finn_home() -> Path:
    """Return the Finn data directory (``FINN_HOME`` or ``~/.finn``)."""
    return Path(os.getenv("FINN_HOME") or Path.home() / ".finn")


class ProfileContextFilter(logging.Filter):
    """Add profile context to log records."""

    def __init__(self):
        super().__init__()
        self.profile_id: Optional[str] = None

    def filter(self, record):
        """Add profile_id to record."""
        record.profile_id = self.profile_id or "system"
        return True


class FinnLogger:
    """Centralized logging manager."""

    def __init__(self, log_level: str = "INFO", max_bytes: int = 10 * 1024 * 1024, backup_count: int = 30,
                 log_dir: Optional[Path] = None):
        self.log_dir = Path(log_dir) if log_dir else finn_home() / "logs"
        self.log_file = self.log_dir / "finn.log"
        self.profile_filter = ProfileContextFilter()

        self.logger = logging.getLogger("finn")
        self.logger.setLevel(getattr(logging, log_level.upper()))
        self.logger.propagate = False

        # Remove existing handlers
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers.clear()

        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [profile:%(profile_id)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(self.profile_filter)
        self.logger.addHandler(console_handler)

        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8"
            )
        except OSError as e:
            self.logger.warning(f"File logging disabled, cannot write to {self.log_dir}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(self.profile_filter)
            self.logger.addHandler(file_handler)

    def set_profile_context(self, profile_id: Optional[str]):
        """Set current profile context for logging."""
        self.profile_filter.profile_id = profile_id

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


# Global logger instance
_logger_instance: Optional[FinnLogger] = None


def get_logger(log_level: str = "INFO") -> logging.Logger:
    """Get or create global logger instance."""
    global _logger_instance
    if _logger_instance is None:
        _logger_instance = FinnLogger(log_level)
    return _logger_instance.get_logger()


def set_profile_context(profile_id: Optional[str]):
    """Set profile context for logging."""
    if _logger_instance:
        _logger_instance.set_profile_context(profile_id)


def set_log_level(log_level: str):
    """Change the level of the shared logger."""
    get_logger().setLevel(getattr(logging, log_level.upper()))


def configure_logging(log_level: str = "INFO", max_file_size_mb: int = 10, backup_count: int = 30,
                      log_dir: Optional[Path] = None) -> logging.Logger:
    """Rebuild the shared logger from application settings."""
    global _logger_instance
    profile_id = _logger_instance.profile_filter.profile_id if _logger_instance else None
    _logger_instance = FinnLogger(log_level, max_file_size_mb * 1024 * 1024, backup_count, log_dir)
    _logger_instance.set_profile_context(profile_id)
    return _logger_instance.get_logger()
