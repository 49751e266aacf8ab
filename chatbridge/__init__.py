"""chatbridge: a provider-normalizing streaming chat backend.

The package exposes one HTTP surface (:mod:`chatbridge.service.app`) in front
of two backend paths: OpenRouter reached directly over ``httpx`` with manual
SSE decoding, and OpenAI / Anthropic / Google reached through their official
async SDKs. Both paths produce the same ``StreamEvent`` sequence.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
