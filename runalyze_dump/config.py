"""Configuration management for runalyze_dump."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class ConfigError(ValueError):
    """Raised when the config file cannot be read."""


def _get_float_env(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class Config:
    """Application configuration."""

    # Base paths
    DATA_DIR = Path(os.environ.get("RUNALYZE_DATA_DIR", "~/.runalyzedump")).expanduser()
    LOGS_DIR = DATA_DIR / "logs"
    CONFIG_FILE = DATA_DIR / "runalyzedump.yaml"
    DEFAULT_COOKIE_PATH = DATA_DIR / "runalyze-cookie.json"
    DEFAULT_SAVE_DIR = DATA_DIR / "activities"

    # Values taken from the environment; None means "not set here"
    USERNAME = os.environ.get("RUNALYZE_USERNAME")
    PASSWORD = os.environ.get("RUNALYZE_PASSWORD")
    PASSWORD_ENCRYPTED = os.environ.get("RUNALYZE_PASSWORD_ENCRYPTED")
    COOKIE_PATH = os.environ.get("RUNALYZE_COOKIE_PATH")
    SAVE_DIR = os.environ.get("RUNALYZE_SAVE_DIR")

    # Security
    ENCRYPTION_KEY = os.environ.get("RUNALYZE_ENCRYPTION_KEY")

    # Logging: trace, debug, info, warn or error
    LOG_LEVEL = os.environ.get("LOG_LEVEL")

    # Remote site
    BASE_URL = "https://runalyze.com"
    COOKIE_DOMAIN = "runalyze.com"
    REQUEST_TIMEOUT = 30  # seconds
    DOWNLOAD_DELAY = _get_float_env("RUNALYZE_DOWNLOAD_DELAY", 0.3)  # seconds between downloads

    @classmethod
    def ensure_directories(cls):
        """Ensure all required directories exist."""
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOGS_DIR.mkdir(parents=True, exist_ok=True)

    def __repr__(self):
        return f"Config(DATA_DIR={self.DATA_DIR}, CONFIG_FILE={self.CONFIG_FILE})"


@dataclass
class Settings:
    """Resolved settings for one run."""

    username: Optional[str]
    password: Optional[str]
    cookie_path: Path
    save_dir: Path
    log_level: str = "info"


def load_config_file(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read the YAML config file.

    A missing default file yields an empty mapping; a missing file that was
    asked for explicitly is an error.
    """
    explicit = path is not None
    path = Path(path if explicit else Config.CONFIG_FILE).expanduser()

    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return {}

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    return {str(key).replace("-", "_").lower(): value for key, value in document.items()}


def load_settings(config_file: Optional[Path] = None, **overrides) -> Settings:
    """Resolve settings: explicit overrides, then environment, then config file, then defaults."""
    file_values = load_config_file(config_file)

    def pick(key, env_value, default=None):
        for value in (overrides.get(key), env_value, file_values.get(key)):
            if value not in (None, ""):
                return value
        return default

    password = pick("password", Config.PASSWORD)
    if not password:
        encrypted = pick("password_encrypted", Config.PASSWORD_ENCRYPTED)
        if encrypted:
            from runalyze_dump.crypto import decrypt_password
            password = decrypt_password(str(encrypted))

    return Settings(
        username=pick("username", Config.USERNAME),
        password=password,
        cookie_path=Path(str(pick("cookie_path", Config.COOKIE_PATH, Config.DEFAULT_COOKIE_PATH))).expanduser(),
        save_dir=Path(str(pick("save_dir", Config.SAVE_DIR, Config.DEFAULT_SAVE_DIR))).expanduser(),
        log_level=str(pick("log_level", Config.LOG_LEVEL, "info")).lower(),
    )
