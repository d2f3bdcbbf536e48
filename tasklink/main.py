import logging

from fastapi import FastAPI

from tasklink.api.routes import router as api_router
from tasklink.core.config import settings
from tasklink.services.webhook_factory import WebhookHandlerFactory


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


configure_logging()
WebhookHandlerFactory.initialize()

app = FastAPI(title=settings.PROJECT_NAME)

app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
