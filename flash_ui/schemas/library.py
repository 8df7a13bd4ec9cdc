import time
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def _new_id() -> str:
    return uuid4().hex


class SavedComponent(BaseModel):
    id: str = Field(default_factory=_new_id)
    artifact_id: str
    session_id: str
    prompt: str
    style_name: str
    html: str
    timestamp: float = Field(default_factory=time.time)
    tags: List[str] = Field(default_factory=list)
    collection_ids: List[str] = Field(default_factory=list)
    is_favorite: bool = False


class Collection(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: float = Field(default_factory=time.time)
    component_ids: List[str] = Field(default_factory=list)
