# solplan/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def load_environment(project_home: Optional[str] = None) -> Optional[Path]:
    """Load .env.local if present, else .env. Returns the file used."""
    home = Path(project_home) if project_home else Path.cwd()
    for fname in (".env.local", ".env"):
        dotenv_path = home / fname
        if dotenv_path.exists():
            load_dotenv(dotenv_path)
            return dotenv_path
    return None


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    flask_key: str = "fallback-secret-key"
    log_level: str = "INFO"
    default_simulations: int = 500
    max_simulations: int = 5000
    debounce_ms: int = 50
    sample_path_limit: int = 10

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            flask_key=os.getenv("FLASK_KEY") or cls.flask_key,
            log_level=(os.getenv("LOG_LEVEL") or cls.log_level).upper(),
            default_simulations=_env_int("DEFAULT_SIMULATIONS", cls.default_simulations),
            max_simulations=_env_int("MAX_SIMULATIONS", cls.max_simulations),
            debounce_ms=_env_int("DEBOUNCE_MS", cls.debounce_ms),
            sample_path_limit=_env_int("SAMPLE_PATH_LIMIT", cls.sample_path_limit),
        )

    def to_flask_config(self) -> dict:
        return {
            "SECRET_KEY": self.flask_key,
            "LOG_LEVEL": self.log_level,
            "DEFAULT_SIMULATIONS": self.default_simulations,
            "MAX_SIMULATIONS": self.max_simulations,
            "DEBOUNCE_MS": self.debounce_ms,
            "SAMPLE_PATH_LIMIT": self.sample_path_limit,
        }
