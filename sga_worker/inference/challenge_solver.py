from pathlib import Path

from sga_worker.inference.client_base import BaseInferenceClient
from sga_worker.inference.prompt_loader import CHALLENGE_PROMPT, load_prompt
from sga_worker.logging.logger import Log


class ChallengeSolver:
    """Reads the text of a challenge image with a single vision call."""

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
        self._prompt = load_prompt(CHALLENGE_PROMPT, prompt_path)

    async def solve(self, image_bytes: bytes, mime_type: str) -> str:
        """Return the solver's raw answer. Callers sanitize it.

        Raises:
            InferenceError: on any provider failure. There is no retry.
        """
        answer = await self._client.generate(
            model=self._model,
            temperature=self._temperature,
            prompt=self._prompt,
            data=image_bytes,
            mime_type=mime_type,
        )
        Log.debug(f"Challenge solver raw answer: {answer!r}")
        return answer
