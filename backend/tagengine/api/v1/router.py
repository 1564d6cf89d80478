"""API v1 router."""
from fastapi import APIRouter

from tagengine.api.v1 import entities, labels, tags

api_router: APIRouter = APIRouter()
api_router.include_router(labels.router, tags=["labels"])
api_router.include_router(tags.router, tags=["tags"])
api_router.include_router(entities.router, tags=["entities"])
