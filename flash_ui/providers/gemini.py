from typing import Any, AsyncIterator, Dict, List, Optional

from flash_ui.providers.base import GenerationRequest, Provider


def _contents(prompt: str) -> List[Dict[str, Any]]:
    return [{"role": "user", "parts": [{"text": prompt}]}]


class GeminiProvider(Provider):
    name = "gemini"

    def _make_client(self) -> Any:
        from google import genai

        return genai.Client(api_key=self._api_key)

    def _config(self, request: GenerationRequest) -> Optional[Any]:
        # Gemini keeps its own default unless a temperature was asked for
        if request.temperature is None:
            return None
        from google.genai import types

        return types.GenerateContentConfig(temperature=request.temperature)

    async def complete(self, request: GenerationRequest) -> str:
        response = await self.client.aio.models.generate_content(
            model=request.model_id,
            contents=_contents(request.prompt),
            config=self._config(request),
        )
        return response.text or ""

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        response_stream = await self.client.aio.models.generate_content_stream(
            model=request.model_id,
            contents=_contents(request.prompt),
            config=self._config(request),
        )
        async for chunk in response_stream:
            text = chunk.text
            if isinstance(text, str):
                yield text
