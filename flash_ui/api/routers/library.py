from typing import List

from fastapi import APIRouter, Depends, HTTPException

from flash_ui.api.deps import get_library_store
from flash_ui.schemas.library import Collection, SavedComponent
from flash_ui.services.library import LibraryStore

router = APIRouter(prefix="/library", tags=["library"])


@router.get("/components", response_model=List[SavedComponent])
async def list_components(store: LibraryStore = Depends(get_library_store)):
    return await store.list_components()


@router.put("/components", response_model=SavedComponent)
async def save_component(component: SavedComponent, store: LibraryStore = Depends(get_library_store)):
    return await store.save_component(component)


@router.delete("/components/{component_id}")
async def remove_component(component_id: str, store: LibraryStore = Depends(get_library_store)) -> dict:
    if not await store.remove_component(component_id):
        raise HTTPException(status_code=404, detail="component not found")
    return {"deleted": component_id}


@router.get("/collections", response_model=List[Collection])
async def list_collections(store: LibraryStore = Depends(get_library_store)):
    return await store.list_collections()


@router.put("/collections", response_model=Collection)
async def save_collection(collection: Collection, store: LibraryStore = Depends(get_library_store)):
    return await store.save_collection(collection)


@router.delete("/collections/{collection_id}")
async def delete_collection(collection_id: str, store: LibraryStore = Depends(get_library_store)) -> dict:
    if not await store.delete_collection(collection_id):
        raise HTTPException(status_code=404, detail="collection not found")
    return {"deleted": collection_id}
