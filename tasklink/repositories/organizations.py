from sqlalchemy import update
from sqlalchemy.orm import Session

from tasklink.core.exceptions import SequenceAllocationError
from tasklink.models.organization import Organization
from tasklink.models.user import User
from tasklink.repositories.base import BaseRepository


class OrganizationRepository(BaseRepository[Organization]):
    """Repository for organizations and their task sequence counter"""

    def __init__(self):
        super().__init__(Organization)

    def increment_task_sequence(self, db: Session, organization_id: int) -> int:
        """
        Atomically advance the organization's task sequence and return the new value.

        Runs as a single UPDATE ... RETURNING statement so concurrent callers
        are serialized by the database row lock and never see the same value.
        """
        stmt = (
            update(Organization)
            .where(Organization.id == organization_id)
            .values(task_sequence=Organization.task_sequence + 1)
            .returning(Organization.task_sequence)
            .execution_options(synchronize_session=False)
        )
        sequence = db.execute(stmt).scalar_one_or_none()
        if sequence is None:
            raise SequenceAllocationError(
                f"Organization {organization_id} not found"
            )
        return sequence


class UserRepository(BaseRepository[User]):
    """Repository for users"""

    def __init__(self):
        super().__init__(User)
