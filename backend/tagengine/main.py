"""FastAPI application exposing the tag engine."""
import logging

from fastapi import FastAPI

from tagengine.api.v1.router import api_router
from tagengine.core.config import settings
from tagengine.services.search_index import TagSearchIndex

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title=settings.PROJECT_NAME)
app.state.search_index = TagSearchIndex.from_settings()
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "healthy"}
