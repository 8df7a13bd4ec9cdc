# the models the server knows about, each tagged with the provider that serves it

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class AIModel:
    id: str
    name: str
    provider: str
    description: str
    api_key_env: str
    available: bool = True


AVAILABLE_MODELS: List[AIModel] = [
    AIModel("gemini-3-flash-preview", "Gemini 3 Flash", "gemini",
            "Latest Gemini, fast frontier-class performance (default)", "GEMINI_API_KEY"),
    AIModel("gemini-3-pro-preview", "Gemini 3 Pro", "gemini",
            "Most capable Gemini 3, best for complex tasks", "GEMINI_API_KEY"),
    AIModel("gemini-2.5-flash", "Gemini 2.5 Flash", "gemini",
            "Stable 2.5 model, reliable and fast", "GEMINI_API_KEY"),
    AIModel("gemini-2.5-pro", "Gemini 2.5 Pro", "gemini",
            "Stable 2.5 Pro, great reasoning", "GEMINI_API_KEY"),
    AIModel("claude-opus-4-5", "Claude Opus 4.5", "claude",
            "Flagship model, best for complex agentic tasks", "ANTHROPIC_API_KEY"),
    AIModel("claude-sonnet-4-5", "Claude Sonnet 4.5", "claude",
            "Fast and capable, great balance of speed/quality", "ANTHROPIC_API_KEY"),
    AIModel("claude-haiku-4-5", "Claude Haiku 4.5", "claude",
            "Fastest Claude, optimized for low latency", "ANTHROPIC_API_KEY"),
    AIModel("gpt-5-mini", "GPT-5 Mini", "openai",
            "Faster, cost-efficient version of GPT-5 for well-defined tasks", "OPENAI_API_KEY"),
    AIModel("gpt-5-nano", "GPT-5 Nano", "openai",
            "Fastest, most cost-efficient version of GPT-5", "OPENAI_API_KEY"),
    AIModel("gpt-5.2", "GPT-5.2", "openai",
            "Primary reasoning model for professional work", "OPENAI_API_KEY"),
]


def get_model_by_id(model_id: str) -> Optional[AIModel]:
    for m in AVAILABLE_MODELS:
        if m.id == model_id:
            return m
    return None


def get_models_by_provider(provider: str) -> List[AIModel]:
    return [m for m in AVAILABLE_MODELS if m.provider == provider]
