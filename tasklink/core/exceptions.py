"""Exception types raised across TaskLink

Domain failures of the task creation pipeline are returned as values
(see tasklink.core.result); the exceptions here cover malformed input and
infrastructure errors.
"""

from typing import Dict, List, Optional


class TaskLinkError(Exception):
    """Base class for TaskLink errors"""


class NormalizationError(TaskLinkError):
    """A webhook payload could not be turned into a PushEvent"""

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}


class PersistenceConflict(TaskLinkError):
    """A write was rejected by a storage constraint"""


class SequenceAllocationError(TaskLinkError):
    """The per-organization task sequence could not be advanced"""


class IntegrationFailure(TaskLinkError):
    """An external integration (GitHub) call failed"""
