from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tasklink.core.exceptions import NormalizationError
from tasklink.schemas.errors import error_map
from tasklink.services.task_reference import extract_task_id

BRANCH_REF_PREFIX = "refs/heads/"


class WebhookProvider(str, Enum):
    GITHUB = "github"


class _PayloadModel(BaseModel):
    # Frozen records; unknown GitHub fields are ignored
    model_config = ConfigDict(frozen=True, from_attributes=True, extra="ignore")


class RepositoryInfo(_PayloadModel):
    full_name: str = Field(min_length=1)
    name: Optional[str] = None


class Pusher(_PayloadModel):
    name: Optional[str] = None
    email: Optional[str] = None


class Sender(_PayloadModel):
    login: Optional[str] = None
    email: Optional[str] = None


class CommitAuthor(_PayloadModel):
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class Commit(_PayloadModel):
    id: Optional[str] = None
    message: str = ""
    author: Optional[CommitAuthor] = None

    @field_validator("message", mode="before")
    @classmethod
    def _none_message(cls, value: Any) -> Any:
        return "" if value is None else value


class HeadCommit(_PayloadModel):
    id: Optional[str] = None
    message: Optional[str] = None


class PushEvent(_PayloadModel):
    """A normalized GitHub push delivery"""

    ref: str = Field(min_length=1)
    before: Optional[str] = None
    after: Optional[str] = None
    repository: RepositoryInfo
    pusher: Optional[Pusher] = None
    sender: Optional[Sender] = None
    created: bool = False
    deleted: bool = False
    forced: bool = False
    commits: Tuple[Commit, ...] = ()
    head_commit: Optional[HeadCommit] = None

    @field_validator("created", "deleted", "forced", mode="before")
    @classmethod
    def _none_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("commits", mode="before")
    @classmethod
    def _none_commits(cls, value: Any) -> Any:
        return () if value is None else value

    def branch_name(self) -> str:
        if self.ref.startswith(BRANCH_REF_PREFIX):
            return self.ref[len(BRANCH_REF_PREFIX):]
        return self.ref

    def repository_full_name(self) -> str:
        return self.repository.full_name

    def repository_name(self) -> str:
        return self.repository.name or self.repository.full_name.rsplit("/", 1)[-1]

    def author_email(self) -> Optional[str]:
        if self.pusher and self.pusher.email:
            return self.pusher.email
        if self.sender and self.sender.email:
            return self.sender.email
        return None

    def author_name(self) -> str:
        if self.pusher and self.pusher.name:
            return self.pusher.name
        if self.sender and self.sender.login:
            return self.sender.login
        return "Unknown"

    def is_branch_creation(self) -> bool:
        return self.created

    def is_branch_deletion(self) -> bool:
        return self.deleted

    def is_force_push(self) -> bool:
        return self.forced

    def commit_count(self) -> int:
        return len(self.commits)

    def latest_commit_message(self) -> Optional[str]:
        if self.head_commit and self.head_commit.message:
            return self.head_commit.message
        if self.commits:
            return self.commits[0].message
        return None

    def commit_authors(self) -> List[str]:
        authors: List[str] = []
        for commit in self.commits:
            if not commit.author:
                continue
            author = commit.author.name or commit.author.username
            if author and author not in authors:
                authors.append(author)
        return authors

    def task_id(self) -> Optional[str]:
        """The task identifier referenced by the branch or, failing that, a commit"""
        return extract_task_id(self)

    def to_activity_data(self) -> Dict[str, Any]:
        """Fields recorded for a task activity entry"""
        return {
            "ref": self.ref,
            "task_id": self.task_id(),
            "repository": self.repository_full_name(),
            "branch": self.branch_name(),
            "author": self.author_name(),
            "author_email": self.author_email(),
            "commits_count": self.commit_count(),
            "latest_message": self.latest_commit_message(),
            "is_new_branch": self.is_branch_creation(),
            "is_deleted": self.is_branch_deletion(),
            "is_force_push": self.is_force_push(),
        }


def normalize_push_event(raw: Any) -> PushEvent:
    """
    Coerce a webhook body (a mapping or an attribute-style object) into a PushEvent.

    Raises NormalizationError when ``ref`` or ``repository`` is missing or a
    field cannot be coerced. Every other field falls back to a default.
    """
    if isinstance(raw, PushEvent):
        return raw
    try:
        return PushEvent.model_validate(raw, from_attributes=True)
    except ValidationError as e:
        raise NormalizationError("Malformed push payload", error_map(e)) from e
