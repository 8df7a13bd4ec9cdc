# lets us swap/add providers without touching endpoint or orchestrator logic
# declares the provider contract: generate(request) returns the full text or an async iterator of text deltas

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional, Union

from flash_ui.core import config


class ProviderError(Exception):
    """Configuration-level provider failure (reported to the caller, never classified)."""

    status = 500


class UnknownModelError(ProviderError):
    status = 400

    def __init__(self, model_id: str) -> None:
        super().__init__(
            f'Unknown model: "{model_id}". Available models can be found at GET /models.'
        )
        self.model_id = model_id


class MissingCredentialError(ProviderError):
    status = 500

    def __init__(self, env_var: str) -> None:
        super().__init__(f"{env_var} is not configured")
        self.env_var = env_var


@dataclass(frozen=True)
class GenerationRequest:
    prompt: str
    model_id: str
    stream: bool = False
    temperature: Optional[float] = None


GenerateReturn = Union[str, AsyncIterator[str]]


class Provider(ABC):
    # provider tag, matches AIModel.provider
    name: str = ""

    def __init__(self, *, api_key: Optional[str] = None, client: Any = None) -> None:
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._make_client()
        return self._client

    def temperature_for(self, request: GenerationRequest) -> float:
        if request.temperature is None:
            return config.TEMPERATURE
        return request.temperature

    async def generate(self, request: GenerationRequest) -> GenerateReturn:
        if request.stream:
            return self.stream(request)
        return await self.complete(request)

    @abstractmethod
    def _make_client(self) -> Any:
        ...

    @abstractmethod
    async def complete(self, request: GenerationRequest) -> str:
        ...

    @abstractmethod
    def stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        ...
