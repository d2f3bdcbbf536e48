"""Find task identifiers (e.g. SHOP-142) embedded in branch names and commit messages"""

import re
from typing import TYPE_CHECKING, Any, Mapping, Optional

if TYPE_CHECKING:
    from tasklink.schemas.webhook import PushEvent

# PREFIX-UUID is tried before PREFIX-N: the integer grammar would otherwise
# accept a UUID whose first segment happens to be all digits.
UUID_TASK_ID = re.compile(
    r"\[?([A-Z]+-[a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})\]?"
)
NUMERIC_TASK_ID = re.compile(r"\[?([A-Z]+-\d+)\]?")

TASK_ID_PATTERNS = (UUID_TASK_ID, NUMERIC_TASK_ID)


def find_task_reference(text: Optional[str]) -> Optional[str]:
    """Return the first task identifier in ``text``, trying each grammar in turn"""
    if not text:
        return None
    for pattern in TASK_ID_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_task_id(event: "PushEvent") -> Optional[str]:
    """
    Correlate a push with a task.

    The ref is searched first, then each commit message in delivery order.
    Only the first reference found is returned.
    """
    task_id = find_task_reference(event.ref)
    if task_id:
        return task_id

    for commit in event.commits:
        task_id = find_task_reference(commit.message)
        if task_id:
            return task_id

    return None


def extract_task_id_from_pull_request(payload: Mapping[str, Any]) -> Optional[str]:
    """Look for a task identifier in a pull_request delivery's title, then its head branch"""
    pull_request = payload.get("pull_request")
    if not isinstance(pull_request, Mapping):
        return None
    head = pull_request.get("head")
    branch = head.get("ref") if isinstance(head, Mapping) else None

    for text in (pull_request.get("title"), branch):
        if not isinstance(text, str):
            continue
        task_id = find_task_reference(text)
        if task_id:
            return task_id
    return None
