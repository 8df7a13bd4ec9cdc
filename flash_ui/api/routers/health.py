from fastapi import APIRouter

from flash_ui.core import config
from flash_ui.providers.factory import PROVIDERS

router = APIRouter(tags=["meta"])


@router.get("/health")
def health():
    # liveness only; credentials are checked per request
    return {"status": "ok", "default_model": config.DEFAULT_MODEL, "providers": sorted(PROVIDERS)}
