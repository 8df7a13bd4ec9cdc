# flash_ui/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flash_ui.core import config
from flash_ui.api.errors import install_error_handlers
from flash_ui.api.routers.health import router as health_router
from flash_ui.api.routers.models import router as models_router
from flash_ui.api.routers.generate import router as generate_router
from flash_ui.api.routers.library import router as library_router
from flash_ui.services.library import LibraryStore


def create_app() -> FastAPI:
    logging.basicConfig(level=config.LOG_LEVEL)
    app = FastAPI(title="Flash UI Generation Server", version="0.1.0", debug=config.DEBUG)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # one library per process, handed to routers through Depends(get_library_store)
    app.state.library_store = LibraryStore(config.LIBRARY_PATH or None)

    install_error_handlers(app)

    # Routers
    app.include_router(health_router)
    app.include_router(models_router)
    app.include_router(generate_router)
    app.include_router(library_router)

    return app


app = create_app()
