"""Main FastAPI application."""

import logging

from fastapi import FastAPI

from .api.errors import register_error_handlers
from .api.reconcile import router as reconcile_router
from .config import api_settings

logging.basicConfig(
    level=api_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(title="Transaction Reconciliation", version="1.0.0")
app.include_router(reconcile_router)
register_error_handlers(app)


@app.get("/")
async def root():
    return {"message": "Reconciliation service running"}


@app.get("/health")
async def health():
    """Liveness probe - always returns OK if app is running."""
    return {"status": "ok"}
