# picks the adapter for a model id from the model's provider tag
# adding a provider means adding one entry to PROVIDERS

from typing import Dict, Tuple, Type

from flash_ui.core import config
from flash_ui.providers.base import MissingCredentialError, Provider, UnknownModelError
from flash_ui.providers.catalog import AIModel, get_model_by_id
from flash_ui.providers.claude import ClaudeProvider
from flash_ui.providers.gemini import GeminiProvider
from flash_ui.providers.openai_chat import OpenAIProvider

PROVIDERS: Dict[str, Type[Provider]] = {
    GeminiProvider.name: GeminiProvider,
    ClaudeProvider.name: ClaudeProvider,
    OpenAIProvider.name: OpenAIProvider,
}


def resolve_model(model_id: str) -> AIModel:
    model = get_model_by_id(model_id)
    if model is None or model.provider not in PROVIDERS:
        raise UnknownModelError(model_id)
    return model


def get_provider(model_id: str) -> Tuple[AIModel, Provider]:
    model = resolve_model(model_id)
    api_key = config.get_api_key(model.api_key_env)
    if not api_key:
        raise MissingCredentialError(model.api_key_env)
    return model, PROVIDERS[model.provider](api_key=api_key)
