from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tasklink.api.deps import get_current_user
from tasklink.core.database import get_db
from tasklink.core.result import Failure, FailureKind
from tasklink.models.user import User
from tasklink.repositories.organizations import OrganizationRepository
from tasklink.repositories.tasks import ServiceRepository
from tasklink.schemas.task import TaskDTO
from tasklink.services.task_creation import TaskCreationPipeline

router = APIRouter(tags=["tasks"])
organization_repo = OrganizationRepository()
service_repo = ServiceRepository()

FAILURE_STATUS = {
    FailureKind.VALIDATION_ERROR: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureKind.INVALID_ASSIGNEE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    FailureKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    FailureKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def _service_id(params: Dict[str, Any]) -> int | None:
    # Unparseable ids are left for the pipeline's validation step to report
    try:
        return int(params["service_id"])
    except (KeyError, TypeError, ValueError):
        return None


@router.post(
    "/organizations/{organization_id}/tasks",
    response_model=TaskDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    organization_id: int,
    params: Dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    organization = organization_repo.get(db, organization_id)
    if organization is None:
        raise HTTPException(status_code=404, detail="Organization not found")

    service = None
    service_id = _service_id(params)
    if service_id is not None:
        service = service_repo.get_for_organization(db, service_id, organization.id)

    result = TaskCreationPipeline(db).call(params, user, organization, service)
    if isinstance(result, Failure):
        raise HTTPException(
            status_code=FAILURE_STATUS[result.kind], detail=result.to_dict()
        )
    return result.value
