"""Model registry and TOML configuration loader.

Loads model variants from models.toml and runtime defaults from
defaults.toml. The PORT environment variable overrides the configured
server port.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from streamrelay.schemas.config import ModelConfig, RelaySettings

# Default config directory inside the streamrelay package
_CONFIG_DIR = Path(__file__).parent / "config"


def load_models(config_path: Path | None = None) -> dict[str, ModelConfig]:
    """Load the model registry from a TOML file.

    Args:
        config_path: Path to models.toml. Defaults to streamrelay/config/models.toml.

    Returns:
        Dictionary mapping model keys to ModelConfig instances.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the TOML structure is invalid.
    """
    path = config_path or _CONFIG_DIR / "models.toml"
    if not path.exists():
        raise FileNotFoundError(f"Model registry not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    models_section = raw.get("models")
    if not models_section or not isinstance(models_section, dict):
        raise ValueError(f"No [models] section found in {path}")

    return {
        key: ModelConfig(**entry)
        for key, entry in models_section.items()
        if isinstance(entry, dict)
    }


def load_settings(config_path: Path | None = None) -> RelaySettings:
    """Load runtime defaults from a TOML file.

    Args:
        config_path: Path to defaults.toml. Defaults to streamrelay/config/defaults.toml.

    Returns:
        RelaySettings with values from the TOML file and the PORT override.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If PORT is set but is not a number.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    if not path.exists():
        raise FileNotFoundError(f"Relay config not found: {path}")

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    relay_section = raw.get("relay", {})
    server_section = raw.get("server", {})
    batch_section = raw.get("batch", {})

    port = server_section.get("port", 3000)
    env_port = os.environ.get("PORT", "").strip()
    if env_port:
        try:
            port = int(env_port)
        except ValueError:
            raise ValueError(f"PORT must be an integer, got {env_port!r}") from None

    return RelaySettings(
        default_model=relay_section.get("default_model", "chat"),
        reasoning_model=relay_section.get("reasoning_model", "reasoner"),
        timeout=relay_section.get("timeout", 120),
        host=server_section.get("host", "0.0.0.0"),
        port=port,
        chat_batch_delay=batch_section.get("chat_delay", 2.0),
        reason_batch_delay=batch_section.get("reason_delay", 3.0),
    )


def get_model(registry: dict[str, ModelConfig], key: str) -> ModelConfig:
    """Look up a model variant by registry key.

    Raises:
        ValueError: If the key is not in the registry.
    """
    try:
        return registry[key]
    except KeyError:
        available = ", ".join(sorted(registry)) or "none"
        raise ValueError(f"Unknown model '{key}' (available: {available})") from None
