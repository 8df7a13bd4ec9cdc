from fastapi import Request

from flash_ui.services.library import LibraryStore


def get_library_store(request: Request) -> LibraryStore:
    return request.app.state.library_store
