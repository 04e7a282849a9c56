"""Public API application entrypoint."""

import logging

from fastapi import FastAPI

from notify_policy.config import get_settings
from notify_policy.routes.notification_preferences import (
    router as notification_preferences_router,
)

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(title=settings.app_name)
app.include_router(notification_preferences_router)


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
