import logging
from typing import Any, Dict

from celery import Celery
from sqlalchemy.exc import OperationalError

from tasklink.core.config import settings
from tasklink.core.database import SessionLocal
from tasklink.core.exceptions import NormalizationError
from tasklink.services.push_processor import PushEventProcessor

logger = logging.getLogger(__name__)

celery = Celery("worker", broker=settings.REDIS_URL, backend=settings.REDIS_URL)
celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)


@celery.task(
    autoretry_for=(OperationalError,),
    retry_backoff=True,
    max_retries=settings.WEBHOOK_TASK_MAX_RETRIES,
)
def process_github_push(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Correlate a verified push delivery with its task; runs after the webhook was acknowledged"""
    db = SessionLocal()
    try:
        activity = PushEventProcessor(db).process(payload)
        if activity is None:
            return {"processed": False}
        return {"processed": True, "activity_id": activity.id}
    except NormalizationError as e:
        # Not retried: the same payload would fail again
        logger.error(f"Dropping malformed push payload: {e.errors}")
        return {"processed": False, "error": "malformed_payload"}
    finally:
        db.close()
