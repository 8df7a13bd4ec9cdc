from typing import Any, AsyncIterator

from flash_ui.providers.base import GenerationRequest, Provider


class OpenAIProvider(Provider):
    name = "openai"

    def _make_client(self) -> Any:
        from openai import AsyncOpenAI

        return AsyncOpenAI(api_key=self._api_key)

    async def complete(self, request: GenerationRequest) -> str:
        response = await self.client.chat.completions.create(
            model=request.model_id,
            messages=[{"role": "user", "content": request.prompt}],
            temperature=self.temperature_for(request),
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        chunks = await self.client.chat.completions.create(
            model=request.model_id,
            messages=[{"role": "user", "content": request.prompt}],
            temperature=self.temperature_for(request),
            stream=True,
        )
        async for chunk in chunks:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content
