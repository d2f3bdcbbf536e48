import logging
from typing import Dict

from .webhook_handlers.base import WebhookHandler
from .webhook_handlers.github import GitHubWebhookHandler
from tasklink.schemas.webhook import WebhookProvider
from tasklink.core.config import get_settings

logger = logging.getLogger(__name__)


class WebhookHandlerFactory:
    _handlers: Dict[WebhookProvider, WebhookHandler] = {}

    @classmethod
    def initialize(cls):
        settings = get_settings()
        if settings.weak_webhook_secret():
            logger.warning(
                "GITHUB_WEBHOOK_SECRET is unset or uses the development default; "
                "configure a real secret before accepting deliveries"
            )
        cls._handlers = {
            WebhookProvider.GITHUB: GitHubWebhookHandler(settings.GITHUB_WEBHOOK_SECRET),
        }

    @classmethod
    def get_handler(cls, provider: WebhookProvider) -> WebhookHandler:
        if not cls._handlers:
            cls.initialize()
        if provider not in cls._handlers:
            raise KeyError(f"No handler registered for provider: {provider}")
        return cls._handlers[provider]
