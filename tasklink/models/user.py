from typing import List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasklink.core.database import Base
from tasklink.models.organization import (
    TASK_CREATOR_ROLES,
    Organization,
    OrganizationMembership,
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(100))
    username: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)

    memberships: Mapped[List[OrganizationMembership]] = relationship(
        back_populates="user", cascade="all, delete-orphan"
    )

    def membership_in(self, organization: Organization) -> Optional[OrganizationMembership]:
        for membership in self.memberships:
            if membership.organization_id == organization.id and membership.active:
                return membership
        return None

    def member_of(self, organization: Organization) -> bool:
        return self.membership_in(organization) is not None

    def can_create_tasks(self, organization: Organization) -> bool:
        """Active members of an active organization may create tasks; viewers may not"""
        membership = self.membership_in(organization)
        return (
            membership is not None
            and organization.active
            and membership.role in TASK_CREATOR_ROLES
        )
