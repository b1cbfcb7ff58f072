from abc import ABC, abstractmethod


class BaseInferenceClient(ABC):
    """Contract for provider-specific multimodal inference clients."""

    @abstractmethod
    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        data: bytes,
        mime_type: str,
    ) -> str:
        """Send one prompt with one inline attachment and return the reply as plain text.

        Raises:
            InferenceNetworkError: on transport or provider API failure.
            InferenceError: when the provider answers without usable text.
        """
