from __future__ import annotations


class SoundcheckError(Exception):
    """Base class for errors raised by the assistant pipeline."""


class LLMConfigurationError(SoundcheckError):
    """The generation provider is not configured (missing key or base URL)."""


class GenerationError(SoundcheckError):
    """The generation provider returned no usable completion."""


class SearchProviderError(SoundcheckError):
    """A search provider call failed or returned an unexpected payload.

    Raised inside provider adapters only; RetrievalClient turns it into an
    empty result.
    """

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
