from typing import ClassVar

from sga_worker.config.settings import Settings
from sga_worker.inference.challenge_solver import ChallengeSolver
from sga_worker.inference.client_base import BaseInferenceClient
from sga_worker.inference.document_interpreter import DocumentInterpreter
from sga_worker.inference.example_client_adapter import ExampleClientAdapter
from sga_worker.inference.gemini_client_adapter import GeminiClientAdapter
from sga_worker.inference.openai_client_adapter import OpenAIClientAdapter


class InferenceClientFactory:
    """Creates the configured inference client and the adapters built on it."""

    PROVIDERS: ClassVar[tuple[str, ...]] = ("example", "gemini", "openai")

    @classmethod
    def create(cls, settings: Settings) -> BaseInferenceClient:
        """Create a configured inference client from application settings."""
        provider = settings.inference_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        if provider == "gemini":
            return GeminiClientAdapter(
                api_key=settings.api_key,
                timeout_seconds=settings.inference_timeout_seconds,
            )
        if provider == "openai":
            return OpenAIClientAdapter(
                api_key=settings.api_key,
                timeout_seconds=settings.inference_timeout_seconds,
                base_url=settings.openai_base_url,
            )
        raise ValueError(
            f"Unknown inference provider '{provider}'. Choose from: {list(cls.PROVIDERS)}"
        )

    @classmethod
    def create_adapters(
        cls, settings: Settings
    ) -> tuple[ChallengeSolver, DocumentInterpreter]:
        """Build the challenge solver and document interpreter on one shared client."""
        client = cls.create(settings)
        solver = ChallengeSolver(
            client=client,
            model=settings.inference_model_name,
            temperature=settings.inference_temperature,
        )
        interpreter = DocumentInterpreter(
            client=client,
            model=settings.inference_model_name,
            temperature=settings.inference_temperature,
        )
        return solver, interpreter
