"""Free study resources. They live on this device only and are never synced."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, field_validator

from .records import LearningResource, ResourceFileType
from .services import get_local_store

router = APIRouter(prefix="/api/resources", tags=["resources"])
logger = logging.getLogger(__name__)


class ResourceRequest(BaseModel):
    title: str
    url: str
    description: str = ""
    file_type: ResourceFileType = "pdf"
    category: str = "General"
    size: str = "N/A"

    @field_validator("title", "url")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title and url cannot be blank.")
        return value.strip()


def _build(payload: ResourceRequest, resource_id: Optional[str] = None) -> LearningResource:
    fields = payload.model_dump()
    if resource_id is not None:
        fields["id"] = resource_id
    return LearningResource(**fields)


@router.get("", response_model=List[LearningResource])
def list_resources(
    search: Optional[str] = Query(default=None, description="Matches title or description."),
    file_type: Optional[ResourceFileType] = Query(default=None),
) -> List[LearningResource]:
    resources = get_local_store().list_resources()
    if search:
        resources = [resource for resource in resources if resource.matches(search)]
    if file_type is not None:
        resources = [resource for resource in resources if resource.file_type == file_type]
    return resources


@router.post("", response_model=LearningResource, status_code=status.HTTP_201_CREATED)
def add_resource(payload: ResourceRequest) -> LearningResource:
    resource = get_local_store().save_resource(_build(payload))
    logger.info("Added resource %s (%s)", resource.id, resource.file_type)
    return resource


@router.put("/{resource_id}", response_model=LearningResource)
def save_resource(resource_id: str, payload: ResourceRequest) -> LearningResource:
    return get_local_store().save_resource(_build(payload, resource_id))


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(resource_id: str) -> None:
    if not get_local_store().delete_resource(resource_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Resource '{resource_id}' not found.")


__all__ = ["router"]
