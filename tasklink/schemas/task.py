from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TaskPriority = Literal["low", "medium", "high", "urgent"]

MAX_TAGS = 10


class TaskCreateParams(BaseModel):
    """Input accepted when creating a task"""

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    priority: TaskPriority = "medium"
    due_date: Optional[date] = None
    assignee_id: Optional[int] = None
    sprint_id: Optional[int] = None
    service_id: Optional[int] = None
    estimated_hours: Optional[float] = Field(default=None, gt=0, le=999)
    tags: List[str] = Field(default_factory=list, max_length=MAX_TAGS)
    labels: List[str] = Field(default_factory=list)
    create_github_issue: bool = False

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title must not be blank")
        return value

    @field_validator("tags", "labels", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("create_github_issue", mode="before")
    @classmethod
    def none_to_false(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("due_date")
    @classmethod
    def due_date_not_in_past(cls, value: Optional[date]) -> Optional[date]:
        if value is not None and value < date.today():
            raise ValueError("Due date cannot be in the past")
        return value

    def cross_field_errors(self) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        if self.sprint_id is not None and self.due_date is None:
            errors["due_date"] = ["A due date is required when a sprint is set"]
        return errors

    def task_attributes(self) -> Dict[str, Any]:
        """Columns copied verbatim onto the new task"""
        return self.model_dump(
            include={
                "title",
                "description",
                "priority",
                "due_date",
                "estimated_hours",
                "tags",
                "labels",
            }
        )


class TaskDTO(BaseModel):
    """Output representation of a task"""

    id: int
    task_id: str
    title: str
    description: Optional[str] = None
    status: str
    priority: str
    organization_id: int
    service_id: Optional[int] = None
    sprint_id: Optional[int] = None
    assignee_id: Optional[int] = None
    created_by_id: int
    due_date: Optional[date] = None
    estimated_hours: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    github_issue_number: Optional[int] = None
    github_issue_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
