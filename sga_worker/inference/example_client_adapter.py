"""Example inference client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseInferenceClient and register the provider in InferenceClientFactory.
"""

from typing import ClassVar

from sga_worker.inference.client_base import BaseInferenceClient


class ExampleClientAdapter(BaseInferenceClient):
    """Example adapter that answers with fixed text per attachment kind.

    No network calls. Useful for local development and tests.
    """

    RESPONSES: ClassVar[dict[str, str]] = {
        "image": "ABC123",
        "application": "Texto de exemplo.",
    }

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []

    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        data: bytes,
        mime_type: str,
    ) -> str:
        _ = model, temperature, data
        self.calls.append((prompt, mime_type))
        kind = mime_type.split("/", 1)[0]
        return self.RESPONSES.get(kind, "")
