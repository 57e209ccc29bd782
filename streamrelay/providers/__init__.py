"""streamrelay provider layer.

The provider layer is the only way the upstream model is called.
All LLM interactions go through LiteLLMProvider via the ModelProvider interface.
"""

from streamrelay.providers.base import ModelProvider, UpstreamError
from streamrelay.providers.litellm_provider import LiteLLMProvider

__all__ = [
    "LiteLLMProvider",
    "ModelProvider",
    "UpstreamError",
]
