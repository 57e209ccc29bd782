"""streamrelay schema definitions.

All Pydantic v2 models used by the relay, its sinks, and the config loader.
"""

from streamrelay.schemas.config import ModelConfig, RelaySettings
from streamrelay.schemas.streaming import (
    Fragment,
    FragmentTag,
    RelayError,
    RelayOutcome,
    RelayStatus,
)

__all__ = [
    "Fragment",
    "FragmentTag",
    "ModelConfig",
    "RelayError",
    "RelayOutcome",
    "RelaySettings",
    "RelayStatus",
]
