from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional

from tasklink.schemas.webhook import PushEvent


def get_header(headers: Mapping[str, str], name: str) -> Optional[str]:
    """Case-insensitive header lookup for plain dicts and framework header maps"""
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


class WebhookHandler(ABC):
    @abstractmethod
    def validate_webhook(self, headers: Mapping[str, str], raw_body: bytes) -> bool:
        """Validate the webhook signature/authenticity against the raw body"""
        pass

    @abstractmethod
    def event_type(self, headers: Mapping[str, str]) -> Optional[str]:
        """Return the delivery's event name, if the provider sent one"""
        pass

    @abstractmethod
    def process_webhook(self, payload: Any) -> PushEvent:
        """Convert a webhook payload to a normalized push event"""
        pass
