from typing import Any, AsyncIterator

from flash_ui.core import config
from flash_ui.providers.base import GenerationRequest, Provider


class ClaudeProvider(Provider):
    name = "claude"

    def _make_client(self) -> Any:
        from anthropic import AsyncAnthropic

        return AsyncAnthropic(api_key=self._api_key)

    async def complete(self, request: GenerationRequest) -> str:
        response = await self.client.messages.create(
            model=request.model_id,
            max_tokens=config.MAX_TOKENS,
            temperature=self.temperature_for(request),
            messages=[{"role": "user", "content": request.prompt}],
        )
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text or ""
        return ""

    async def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        async with self.client.messages.stream(
            model=request.model_id,
            max_tokens=config.MAX_TOKENS,
            temperature=self.temperature_for(request),
            messages=[{"role": "user", "content": request.prompt}],
        ) as events:
            # only text deltas are surfaced; message/block start/stop events are dropped
            async for event in events:
                if event.type != "content_block_delta":
                    continue
                if getattr(event.delta, "type", None) == "text_delta":
                    yield event.delta.text
