from tasklink.models.organization import Organization, OrganizationMembership
from tasklink.models.service import Service, Sprint
from tasklink.models.task import Task, TaskActivity
from tasklink.models.user import User

__all__ = [
    "Organization",
    "OrganizationMembership",
    "Service",
    "Sprint",
    "Task",
    "TaskActivity",
    "User",
]
