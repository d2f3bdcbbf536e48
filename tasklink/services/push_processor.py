import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from tasklink.models.task import Task, TaskActivity
from tasklink.repositories.tasks import (
    ServiceRepository,
    TaskActivityRepository,
    TaskRepository,
)
from tasklink.schemas.webhook import PushEvent, normalize_push_event


class PushEventProcessor:
    """Correlates push deliveries with tasks and records the activity"""

    def __init__(self, db: Session):
        self.db = db
        self.service_repo = ServiceRepository()
        self.task_repo = TaskRepository()
        self.activity_repo = TaskActivityRepository()
        self.logger = logging.getLogger(__name__)

    def process(self, payload: Any) -> Optional[TaskActivity]:
        """
        Handle one push delivery.

        Returns the recorded activity, or None when the push references no
        known task. Raises NormalizationError for malformed payloads.
        """
        event = normalize_push_event(payload)
        task_id = event.task_id()
        if not task_id:
            self.logger.info(f"GitHub push: no task id found in {event.ref}")
            return None

        task = self.find_task(event, task_id)
        if task is None:
            self.logger.warning(f"GitHub push: task {task_id} not found")
            return None

        activity = self.activity_repo.create(
            self.db, obj_in={"task_pk": task.id, **event.to_activity_data()}
        )
        self.advance_status(task, event)
        self.db.commit()

        self.logger.info(
            f"GitHub push on {event.repository_full_name()}:{event.branch_name()} "
            f"recorded for task {task_id} ({event.commit_count()} commits)"
        )
        return activity

    def find_task(self, event: PushEvent, task_id: str) -> Optional[Task]:
        """
        Resolve ``task_id`` within the organizations linking the pushed repository.

        With no linked service the lookup covers all organizations. Either
        way only an unambiguous match is accepted.
        """
        services = self.service_repo.list_by_github_repository(
            self.db, event.repository_full_name()
        )
        organization_ids = {service.organization_id for service in services}
        candidates = self.task_repo.list_by_task_id(
            self.db, task_id, organization_ids=organization_ids or None
        )
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            self.logger.warning(
                f"GitHub push: task {task_id} is ambiguous across "
                f"{len(candidates)} organizations; ignoring"
            )
        return None

    def advance_status(self, task: Task, event: PushEvent) -> None:
        if task.status == "todo" and event.commits:
            task.status = "in_progress"
            self.logger.info(f"Task {task.task_id} moved to in_progress")
