from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_WEBHOOK_SECRET = "development_webhook_secret"


class Settings(BaseSettings):
    PROJECT_NAME: str = "TaskLink"
    DATABASE_URL: str = "sqlite:///./tasklink.db"  # Default for development
    REDIS_URL: str = "redis://localhost:6379"  # Default for development
    TESTING: bool = False
    LOG_LEVEL: str = "INFO"

    # GitHub integration
    GITHUB_WEBHOOK_SECRET: str = DEFAULT_WEBHOOK_SECRET
    GITHUB_TOKEN: str = ""

    # Bearer token auth
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"

    # Task identifiers
    DEFAULT_TASK_PREFIX: str = "TASK"
    TASK_SEQUENCE_MAX_ATTEMPTS: int = 5

    # Async webhook processing
    WEBHOOK_TASK_MAX_RETRIES: int = 3

    model_config = {
        "env_file": ".env"
    }

    def weak_webhook_secret(self) -> bool:
        """True when the webhook secret is unset or still the development default"""
        return self.GITHUB_WEBHOOK_SECRET in ("", DEFAULT_WEBHOOK_SECRET)


@lru_cache
def get_settings():
    return Settings()


settings = get_settings()
