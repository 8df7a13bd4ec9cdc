from typing import List, Optional

from pydantic import BaseModel, Field

from flash_ui.core import config


class GenerateRequest(BaseModel):
    # prompt is checked by the endpoint so a missing one answers 400 {"error"}
    prompt: Optional[str] = None
    model: str = Field(default=config.DEFAULT_MODEL)
    stream: bool = Field(default=False)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)


class VariationsRequest(BaseModel):
    prompt: Optional[str] = None
    model: str = Field(default=config.DEFAULT_MODEL)


class GenerateResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str
    kind: Optional[str] = None


class ModelInfo(BaseModel):
    id: str
    name: str
    provider: str
    description: str
    api_key_env: str
    available: bool


class ModelList(BaseModel):
    default: str
    models: List[ModelInfo]
