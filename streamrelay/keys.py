"""API key loading for streamrelay.

Keys are read with this priority:
  1. Environment variables (highest — already set in shell)
  2. ~/.streamrelay/keys.env (user-level keys)
  3. .env in current directory (project-level)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from streamrelay.schemas.config import ModelConfig

logger = logging.getLogger(__name__)

# Directory for user-level streamrelay configuration
STREAMRELAY_HOME = Path.home() / ".streamrelay"
KEYS_FILE = STREAMRELAY_HOME / "keys.env"


class MissingKeyError(RuntimeError):
    """Raised when the credential for a model variant is not configured."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"Environment variable {env_var} is not set")
        self.env_var = env_var


def load_keys_env() -> None:
    """Load API keys from ~/.streamrelay/keys.env and .env into os.environ.

    Existing env vars are NOT overwritten, and an earlier file wins over
    a later one.
    """
    files = [KEYS_FILE, Path.cwd() / ".env"]
    for env_file in files:
        if env_file.is_file():
            _load_env_file(env_file)


def _load_env_file(path: Path) -> None:
    """Parse a simple KEY=VALUE .env file and set vars that aren't already set."""
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith("export "):
                line = line[len("export "):]
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and not os.environ.get(key):
                os.environ[key] = value
                logger.debug("Loaded %s from %s", key, path)
    except OSError:
        logger.debug("Could not read %s", path)


def require_api_key(config: ModelConfig) -> str:
    """Return the API key for a model variant.

    Raises:
        MissingKeyError: If the key's environment variable is unset or empty.
    """
    api_key = os.environ.get(config.api_key_env, "").strip()
    if not api_key:
        raise MissingKeyError(config.api_key_env)
    return api_key
