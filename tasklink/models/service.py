from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasklink.core.database import Base
from tasklink.models.organization import Organization


class Service(Base):
    """A product/service inside an organization, optionally linked to a GitHub repository"""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"))
    name: Mapped[str] = mapped_column(String(100))
    task_prefix: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    github_repository: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True, index=True
    )  # "owner/name"
    github_enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    organization: Mapped[Organization] = relationship()


class Sprint(Base):
    __tablename__ = "sprints"

    id: Mapped[int] = mapped_column(primary_key=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"))
    name: Mapped[str] = mapped_column(String(100))
    starts_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    ends_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
