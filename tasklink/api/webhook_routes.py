import json
import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from tasklink.core.exceptions import NormalizationError
from tasklink.schemas.webhook import WebhookProvider
from tasklink.services.task_reference import extract_task_id_from_pull_request
from tasklink.services.webhook_factory import WebhookHandlerFactory
from tasklink.worker import process_github_push

router = APIRouter(tags=["webhooks"])
logger = logging.getLogger(__name__)
security_logger = logging.getLogger("tasklink.security")


def _client_info(request: Request) -> str:
    host = request.client.host if request.client else "unknown"
    return f"ip={host} user_agent={request.headers.get('user-agent', 'unknown')}"


@router.post("/webhooks/{provider}")
async def webhook_handler(provider: WebhookProvider, request: Request):
    # The signature covers the bytes as sent; never re-serialize before checking
    raw_body = await request.body()
    headers = request.headers

    try:
        handler = WebhookHandlerFactory.get_handler(provider)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not handler.validate_webhook(headers, raw_body):
        security_logger.warning(
            f"Rejected {provider.value} webhook with invalid signature ({_client_info(request)})"
        )
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    event_type = handler.event_type(headers)
    if not event_type:
        raise HTTPException(status_code=400, detail="Missing event type")

    if event_type == "ping":
        logger.info("GitHub webhook ping received")
        return {"message": "pong"}

    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise HTTPException(status_code=400, detail="Malformed JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Malformed JSON payload")

    if event_type == "pull_request":
        task_id = extract_task_id_from_pull_request(payload)
        if task_id:
            logger.info(f"GitHub PR: task {task_id} - {payload.get('action')}")
        return {"message": "Pull request event received", "task_id": task_id}

    if event_type != "push":
        logger.info(f"Unsupported GitHub event: {event_type}")
        return {"message": f"Event type '{event_type}' is not supported"}

    try:
        event = handler.process_webhook(payload)
    except NormalizationError as e:
        security_logger.warning(
            f"GitHub push failed validation: {e.errors} ({_client_info(request)})"
        )
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Webhook validation failed", "errors": e.errors},
        )

    task_id = event.task_id()
    process_github_push.delay(payload)
    logger.info(
        f"Queued GitHub push for {event.repository_full_name()} "
        f"({event.commit_count()} commits, task {task_id or 'none'})"
    )

    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={"message": "Push event accepted", "task_id": task_id},
    )
