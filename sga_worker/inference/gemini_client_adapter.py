import httpx
from google import genai
from google.genai import errors, types

from sga_worker.exceptions import InferenceError, InferenceNetworkError
from sga_worker.inference.client_base import BaseInferenceClient


class GeminiClientAdapter(BaseInferenceClient):
    """Inference client adapter built on the Gemini generate-content API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        max_output_tokens: int = 4096,
    ) -> None:
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=timeout_seconds * 1000),
        )
        self._max_output_tokens = max_output_tokens

    async def generate(
        self,
        *,
        model: str,
        temperature: float,
        prompt: str,
        data: bytes,
        mime_type: str,
    ) -> str:
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=[
                    types.Content(
                        role="user",
                        parts=[
                            types.Part.from_text(text=prompt),
                            types.Part.from_bytes(data=data, mime_type=mime_type),
                        ],
                    ),
                ],
                config=types.GenerateContentConfig(
                    temperature=temperature,
                    top_p=1.0,
                    top_k=1,
                    max_output_tokens=self._max_output_tokens,
                ),
            )
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(f"AI provider network error: {exc}") from exc
        except errors.APIError as exc:
            raise InferenceNetworkError(f"AI provider API error: {exc}") from exc

        text = response.text
        if text is None:
            raise InferenceError("AI returned empty response")
        return text
