from dataclasses import asdict

from fastapi import APIRouter

from flash_ui.core import config
from flash_ui.providers.catalog import AVAILABLE_MODELS
from flash_ui.schemas.generate import ModelInfo, ModelList

router = APIRouter(tags=["models"])


@router.get("/models", response_model=ModelList)
def list_models() -> ModelList:
    return ModelList(
        default=config.DEFAULT_MODEL,
        models=[ModelInfo(**asdict(m)) for m in AVAILABLE_MODELS],
    )
