from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from tasklink.models.service import Service, Sprint
from tasklink.models.task import Task, TaskActivity
from tasklink.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    """Repository for services"""

    def __init__(self):
        super().__init__(Service)

    def get_for_organization(
        self, db: Session, service_id: int, organization_id: int
    ) -> Optional[Service]:
        return self.find_by(db, id=service_id, organization_id=organization_id)

    def list_by_github_repository(self, db: Session, full_name: str) -> List[Service]:
        """Services linked to a GitHub repository ("owner/name"), across organizations"""
        return list(
            db.scalars(select(Service).where(Service.github_repository == full_name))
        )


class SprintRepository(BaseRepository[Sprint]):
    """Repository for sprints"""

    def __init__(self):
        super().__init__(Sprint)

    def get_for_organization(
        self, db: Session, sprint_id: int, organization_id: int
    ) -> Optional[Sprint]:
        return self.find_by(db, id=sprint_id, organization_id=organization_id)


class TaskRepository(BaseRepository[Task]):
    """Repository for tasks"""

    def __init__(self):
        super().__init__(Task)

    def get_by_task_id(
        self, db: Session, organization_id: int, task_id: str
    ) -> Optional[Task]:
        return self.find_by(db, organization_id=organization_id, task_id=task_id)

    def list_by_task_id(
        self,
        db: Session,
        task_id: str,
        organization_ids: Optional[Iterable[int]] = None,
    ) -> List[Task]:
        """Tasks carrying ``task_id``, optionally limited to some organizations"""
        stmt = select(Task).where(Task.task_id == task_id)
        if organization_ids is not None:
            stmt = stmt.where(Task.organization_id.in_(list(organization_ids)))
        return list(db.scalars(stmt))


class TaskActivityRepository(BaseRepository[TaskActivity]):
    """Repository for task activity records"""

    def __init__(self):
        super().__init__(TaskActivity)
