import logging
import time
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from tasklink.core.config import settings
from tasklink.core.exceptions import SequenceAllocationError
from tasklink.models.organization import Organization
from tasklink.models.service import Service
from tasklink.repositories.organizations import OrganizationRepository

logger = logging.getLogger(__name__)


def format_task_id(prefix: str, sequence: int) -> str:
    """``("SHOP", 7) -> "SHOP-007"``; sequences above 999 simply grow wider"""
    return f"{prefix}-{sequence:03d}"


class TaskSequenceAllocator:
    """Hands out unique, increasing task identifiers per organization"""

    def __init__(
        self,
        db: Session,
        organization_repo: Optional[OrganizationRepository] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: float = 0.05,
    ):
        self.db = db
        self.organization_repo = organization_repo or OrganizationRepository()
        self.max_attempts = max_attempts or settings.TASK_SEQUENCE_MAX_ATTEMPTS
        self.backoff_seconds = backoff_seconds

    def task_prefix(
        self, organization: Organization, service: Optional[Service] = None
    ) -> str:
        if service is not None and service.task_prefix:
            return service.task_prefix
        return organization.task_prefix or settings.DEFAULT_TASK_PREFIX

    def next_sequence(self, organization_id: int) -> int:
        """
        Advance the organization counter, retrying while the row is locked.

        Raises SequenceAllocationError once ``max_attempts`` is exhausted.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return self.organization_repo.increment_task_sequence(
                    self.db, organization_id
                )
            except OperationalError as e:
                self.db.rollback()
                logger.warning(
                    f"Task sequence increment for organization {organization_id} "
                    f"failed (attempt {attempt}/{self.max_attempts}): {e}"
                )
                if attempt < self.max_attempts:
                    time.sleep(self.backoff_seconds * attempt)

        raise SequenceAllocationError(
            f"Could not allocate a task sequence for organization {organization_id} "
            f"after {self.max_attempts} attempts"
        )

    def next_task_id(
        self, organization: Organization, service: Optional[Service] = None
    ) -> str:
        prefix = self.task_prefix(organization, service)
        sequence = self.next_sequence(organization.id)
        return format_task_id(prefix, sequence)
