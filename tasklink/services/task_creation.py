"""Task creation workflow

Steps run in a fixed order over a shared TaskCreationContext. Strict steps
return ``StepResult`` and may abort the workflow with a Failure; tolerant
steps return ``Success`` only and degrade internally instead of failing.
The whole workflow is one database transaction.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tasklink.core.exceptions import PersistenceConflict
from tasklink.core.result import Failure, FailureKind, Result, Success
from tasklink.models.organization import Organization
from tasklink.models.service import Service, Sprint
from tasklink.models.task import Task
from tasklink.models.user import User
from tasklink.repositories.organizations import UserRepository
from tasklink.repositories.tasks import SprintRepository, TaskRepository
from tasklink.schemas.errors import error_map
from tasklink.schemas.task import TaskCreateParams, TaskDTO
from tasklink.services.github_issues import GitHubIssueService
from tasklink.services.task_sequence import TaskSequenceAllocator

logger = logging.getLogger(__name__)

INITIAL_STATUS = "todo"


@dataclass
class TaskCreationContext:
    params: Dict[str, Any]
    user: User
    organization: Organization
    service: Optional[Service] = None
    validated_params: Optional[TaskCreateParams] = None
    assignee: Optional[User] = None
    task_id: Optional[str] = None
    task: Optional[Task] = None
    sprint: Optional[Sprint] = None


StepResult = Union[Success[TaskCreationContext], Failure]


class TaskCreationPipeline:
    def __init__(
        self,
        db: Session,
        allocator: Optional[TaskSequenceAllocator] = None,
        github: Optional[GitHubIssueService] = None,
    ):
        self.db = db
        self.allocator = allocator or TaskSequenceAllocator(db)
        self._github = github
        self.user_repo = UserRepository()
        self.sprint_repo = SprintRepository()
        self.task_repo = TaskRepository()

    @property
    def github(self) -> GitHubIssueService:
        if self._github is None:
            self._github = GitHubIssueService()
        return self._github

    def call(
        self,
        params: Dict[str, Any],
        user: User,
        organization: Organization,
        service: Optional[Service] = None,
    ) -> Result[TaskDTO]:
        """
        Create a task.

        Returns Success(TaskDTO) or the Failure of the first strict step that
        rejected the request. Nothing is persisted on failure. Infrastructure
        errors (PersistenceConflict, SequenceAllocationError, database
        errors) are raised after rolling back.
        """
        context = TaskCreationContext(
            params=dict(params or {}),
            user=user,
            organization=organization,
            service=service,
        )

        try:
            result = self._run(context)
        except Exception:
            self.db.rollback()
            raise

        if isinstance(result, Failure):
            self.db.rollback()
            logger.info(
                f"Task creation rejected for user {user.id} in organization "
                f"{organization.id}: {result.kind.value}"
            )
        else:
            self.db.commit()
            logger.info(f"Created task {result.value.task_id}")
        return result

    def _run(self, context: TaskCreationContext) -> Result[TaskDTO]:
        steps = (
            self.validate_params,
            self.check_organization_permission,
            self.validate_service_context,
            self.validate_assignee,
            self.generate_task_id,
            self.create_task,
            self.link_to_sprint,
            self.create_github_issue,
        )
        for step in steps:
            outcome = step(context)
            if isinstance(outcome, Failure):
                return outcome
            context = outcome.value

        return Success(self.build_dto(context))

    # Strict steps

    def validate_params(self, context: TaskCreationContext) -> StepResult:
        try:
            validated = TaskCreateParams.model_validate(context.params)
        except ValidationError as e:
            return Failure(FailureKind.VALIDATION_ERROR, error_map(e))

        errors = validated.cross_field_errors()
        if errors:
            return Failure(FailureKind.VALIDATION_ERROR, errors)

        context.validated_params = validated
        return Success(context)

    def check_organization_permission(self, context: TaskCreationContext) -> StepResult:
        user, organization = context.user, context.organization
        if user is not None and organization is not None and user.can_create_tasks(organization):
            return Success(context)
        return Failure(
            FailureKind.PERMISSION_DENIED,
            "You do not have permission to create tasks in this organization",
        )

    def validate_service_context(self, context: TaskCreationContext) -> StepResult:
        service = context.service
        if context.validated_params.service_id is not None and service is None:
            return Failure(FailureKind.NOT_FOUND, "Service not found")
        if service is not None and service.organization_id != context.organization.id:
            return Failure(FailureKind.NOT_FOUND, "Service not found")
        return Success(context)

    def validate_assignee(self, context: TaskCreationContext) -> StepResult:
        assignee_id = context.validated_params.assignee_id
        if assignee_id is None:
            return Success(context)

        assignee = self.user_repo.get(self.db, assignee_id)
        if assignee is None or not assignee.member_of(context.organization):
            return Failure(FailureKind.INVALID_ASSIGNEE, "Invalid assignee")

        context.assignee = assignee
        return Success(context)

    def create_task(self, context: TaskCreationContext) -> StepResult:
        attributes = context.validated_params.task_attributes()
        attributes.update(
            task_id=context.task_id,
            organization_id=context.organization.id,
            service_id=context.service.id if context.service else None,
            assignee_id=context.assignee.id if context.assignee else None,
            created_by_id=context.user.id,
            status=INITIAL_STATUS,
        )
        try:
            context.task = self.task_repo.create(self.db, obj_in=attributes)
        except IntegrityError as e:
            self.db.rollback()
            raise PersistenceConflict(
                f"Could not store task {context.task_id}: {e.orig}"
            ) from e
        return Success(context)

    # Steps that never fail

    def generate_task_id(self, context: TaskCreationContext) -> Success[TaskCreationContext]:
        context.task_id = self.allocator.next_task_id(context.organization, context.service)
        return Success(context)

    def link_to_sprint(self, context: TaskCreationContext) -> Success[TaskCreationContext]:
        sprint_id = context.validated_params.sprint_id
        if sprint_id is None:
            return Success(context)

        sprint = self.sprint_repo.get_for_organization(
            self.db, sprint_id, context.organization.id
        )
        if sprint is None:
            logger.info(
                f"Sprint {sprint_id} not found; task {context.task_id} left unlinked"
            )
            return Success(context)

        context.task.sprint_id = sprint.id
        context.sprint = sprint
        return Success(context)

    def create_github_issue(self, context: TaskCreationContext) -> Success[TaskCreationContext]:
        service = context.service
        if not (
            service is not None
            and service.github_enabled
            and context.validated_params.create_github_issue
        ):
            return Success(context)

        try:
            self.github.create_issue(context.task, service)
        except Exception as e:
            # The task is kept even when GitHub is unavailable
            logger.error(f"GitHub issue creation failed for task {context.task_id}: {e}")
        return Success(context)

    def build_dto(self, context: TaskCreationContext) -> TaskDTO:
        return TaskDTO.model_validate(context.task)
