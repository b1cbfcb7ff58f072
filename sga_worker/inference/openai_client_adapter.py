import base64
import mimetypes

import httpx
import openai

from sga_worker.exceptions import InferenceError, InferenceNetworkError
from sga_worker.inference.client_base import BaseInferenceClient


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client adapter built on OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            self._attachment_part(data, mime_type),
                        ],
                    },
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise InferenceError("AI returned empty response")
        return content

    @staticmethod
    def _attachment_part(data: bytes, mime_type: str) -> dict[str, object]:
        data_url = f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
        if mime_type.startswith("image/"):
            return {"type": "image_url", "image_url": {"url": data_url}}
        extension = mimetypes.guess_extension(mime_type) or ".bin"
        return {
            "type": "file",
            "file": {"filename": f"document{extension}", "file_data": data_url},
        }
