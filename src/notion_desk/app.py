"""FastAPI application with lifespan and health endpoint."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from notion_desk.config import get_settings
from notion_desk.llm.router import router as llm_router
from notion_desk.logging_config import configure_logging
from notion_desk.notion.router import router as notion_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    yield


app = FastAPI(
    title="Notion Desk",
    lifespan=lifespan,
)
app.include_router(notion_router)
app.include_router(llm_router)


@app.get("/health")
async def health():
    """Health check endpoint for container platforms and local development."""
    return {
        "status": "ok",
        "service": "notion-desk",
        "version": "0.1.0",
    }
