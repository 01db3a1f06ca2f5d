# src/sanity/core/config.py
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from sanity.core.exceptions import ConfigurationError

DEFAULT_CONFIG_DIR = Path.home() / ".sanity_dashboard"
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    """Everything the application needs to reach its backend."""
    supabase_url: str
    supabase_anon_key: str
    config_dir: Path = DEFAULT_CONFIG_DIR
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url}/auth/v1"

    @property
    def session_file(self) -> Path:
        return self.config_dir / "session.json"

    @property
    def log_dir(self) -> Path:
        return self.config_dir / "logs"


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Loads settings from a .env file (if present) and the process environment.
    Variables already set in the environment win over the .env file.

    Args:
        env_file: Explicit .env path. Defaults to ./.env in the working directory.

    Raises:
        ConfigurationError: if the backend URL or key is missing, or the timeout is not a number.
    """
    dotenv_path = env_file or Path.cwd() / ".env"
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)

    url = os.getenv("SUPABASE_URL", "").strip()
    if not url:
        raise ConfigurationError("SUPABASE_URL")
    key = os.getenv("SUPABASE_ANON_KEY", "").strip()
    if not key:
        raise ConfigurationError("SUPABASE_ANON_KEY")

    raw_timeout = os.getenv("SANITY_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigurationError("SANITY_REQUEST_TIMEOUT", f"must be a number, got {raw_timeout!r}")

    config_dir = os.getenv("SANITY_CONFIG_DIR")
    return Settings(
        supabase_url=url.rstrip("/"),
        supabase_anon_key=key,
        config_dir=Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR,
        request_timeout=timeout,
        log_level=os.getenv("SANITY_LOG_LEVEL", "INFO").upper(),
    )
