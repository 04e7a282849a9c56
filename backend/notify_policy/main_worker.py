"""Worker application entrypoint for the digest dispatch job."""

import logging

from fastapi import Depends, FastAPI
from pydantic import BaseModel
from sqlalchemy import select

from notify_policy.config import get_settings
from notify_policy.db import get_db
from notify_policy.models import NotificationPreferenceRecord
from notify_policy.services.digest import DigestScheduler
from notify_policy.services.mutes import MuteRegistry
from notify_policy.services.store import SqlPreferenceStore

settings = get_settings()

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title=f"{settings.app_name}-worker")


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "service": "worker"}


def _user_ids(db) -> list[int]:
    return list(
        db.execute(
            select(NotificationPreferenceRecord.user_id).order_by(
                NotificationPreferenceRecord.user_id
            )
        )
        .scalars()
        .all()
    )


@app.post("/internal/jobs/digest_due")
def run_digest_due(db=Depends(get_db)):  # noqa: B008
    results = []
    for user_id in _user_ids(db):
        try:
            scheduler = DigestScheduler(SqlPreferenceStore(db, user_id))
            results.append(
                {
                    "user_id": user_id,
                    "status": "ok",
                    "digest_mode": scheduler.get_digest_mode(),
                    "due": scheduler.should_send_digest(),
                }
            )
        except Exception as exc:
            db.rollback()
            logger.warning(
                "Digest check failed", extra={"user_id": user_id, "error": str(exc)}
            )
            results.append({"user_id": user_id, "status": "error", "error": str(exc)})
    return {"status": "ok", "results": results}


class DigestSentRequest(BaseModel):
    user_id: int


@app.post("/internal/jobs/digest_sent")
def mark_digest_sent(
    payload: DigestSentRequest,
    db=Depends(get_db),  # noqa: B008
):
    scheduler = DigestScheduler(SqlPreferenceStore(db, payload.user_id))
    sent_at = scheduler.mark_digest_sent()
    return {
        "status": "ok",
        "user_id": payload.user_id,
        "last_digest_sent": sent_at.isoformat(),
    }


@app.post("/internal/jobs/mute_compaction")
def run_mute_compaction(db=Depends(get_db)):  # noqa: B008
    removed = 0
    errors = 0
    for user_id in _user_ids(db):
        try:
            removed += MuteRegistry(SqlPreferenceStore(db, user_id)).compact_expired()
        except Exception as exc:
            db.rollback()
            errors += 1
            logger.warning(
                "Mute compaction failed", extra={"user_id": user_id, "error": str(exc)}
            )
    return {"status": "ok", "removed": removed, "errors": errors}
