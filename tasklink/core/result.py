"""Success/Failure values threaded through multi-step workflows"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class FailureKind(str, Enum):
    VALIDATION_ERROR = "validation_error"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    INVALID_ASSIGNEE = "invalid_assignee"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    detail: Any

    @property
    def success(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "detail": self.detail}


Result = Union[Success[T], Failure]
