"""AI-powered text extraction from retrieved licensing documents."""

from pathlib import Path

from sga_worker.inference.client_base import BaseInferenceClient
from sga_worker.inference.prompt_loader import DOCUMENT_PROMPT, load_prompt
from sga_worker.logging.logger import Log


class DocumentInterpreter:
    """Extracts the conditioning text of a document with a single inference call.

    Which passage to return (text beside the signature field, or sector 4 as
    a fallback) and which placeholders to leave out is decided by the prompt.
    The answer is returned exactly as the provider produced it.
    """

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        model: str,
        temperature: float,
        prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._prompt = load_prompt(DOCUMENT_PROMPT, prompt_path)

    async def extract(self, document_bytes: bytes, mime_type: str) -> str:
        """Return the extracted text verbatim.

        Raises:
            InferenceError: on any provider failure. There is no retry.
        """
        text = await self._client.generate(
            model=self._model,
            temperature=self._temperature,
            prompt=self._prompt,
            data=document_bytes,
            mime_type=mime_type,
        )
        Log.info(f"Document interpreter returned {len(text)} chars")
        return text
