from typing import Any, Mapping, Optional

from tasklink.core.security import verify_signature
from tasklink.schemas.webhook import PushEvent, normalize_push_event

from .base import WebhookHandler, get_header

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"


class GitHubWebhookHandler(WebhookHandler):
    def __init__(self, webhook_secret: str):
        self.webhook_secret = webhook_secret

    def validate_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        signature = get_header(headers, SIGNATURE_HEADER)
        return verify_signature(self.webhook_secret, raw_body, signature)

    def event_type(self, headers: Mapping[str, str]) -> Optional[str]:
        return get_header(headers, EVENT_HEADER)

    def process_webhook(self, payload: Any) -> PushEvent:
        return normalize_push_event(payload)
