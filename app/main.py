"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import get_settings
from app.logging_config import configure_logging
from app.routers import health, motivation
from app.services.motivation_service import create_motivation_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the motivation service once per process and release it on shutdown."""
    configure_logging()
    service = create_motivation_service(get_settings())
    app.state.motivation_service = service
    try:
        yield
    finally:
        await service.aclose()


app = FastAPI(title="Activity Motivation API", lifespan=lifespan)


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(motivation.router)
