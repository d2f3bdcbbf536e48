import pytest

from tasklink.core.exceptions import NormalizationError
from tasklink.models import Service, Task, TaskActivity
from tasklink.services.push_processor import PushEventProcessor


@pytest.fixture
def processor(db):
    return PushEventProcessor(db)


@pytest.fixture
def make_task(db, user):
    def _make_task(organization, task_id: str, status: str = "todo") -> Task:
        task = Task(
            task_id=task_id,
            organization_id=organization.id,
            created_by_id=user.id,
            title=f"Task {task_id}",
            status=status,
        )
        db.add(task)
        db.commit()
        return task

    return _make_task


def test_push_records_activity_and_starts_task(db, processor, make_task, organization, service, github_push_payload):
    task = make_task(organization, "SHOP-142")

    activity = processor.process(github_push_payload)

    assert isinstance(activity, TaskActivity)
    assert activity.task_pk == task.id
    assert activity.task_id == "SHOP-142"
    assert activity.ref == "refs/heads/SHOP-142-shopping-cart"
    assert activity.repository == "creatia/creatia-app"
    assert activity.branch == "SHOP-142-shopping-cart"
    assert activity.author == "John Doe"
    assert activity.commits_count == 1
    db.refresh(task)
    assert task.status == "in_progress"


def test_branch_creation_without_commits_keeps_status(db, processor, make_task, organization, service, github_push_payload):
    task = make_task(organization, "SHOP-142")
    github_push_payload.update(created=True, commits=[], head_commit=None)

    activity = processor.process(github_push_payload)

    assert activity.is_new_branch is True
    db.refresh(task)
    assert task.status == "todo"


def test_in_progress_task_is_unchanged(db, processor, make_task, organization, service, github_push_payload):
    task = make_task(organization, "SHOP-142", status="in_progress")
    github_push_payload["head_commit"]["message"] = "Cart done, ready for review"

    processor.process(github_push_payload)

    db.refresh(task)
    assert task.status == "in_progress"


def test_done_task_is_not_reopened(db, processor, make_task, organization, service, github_push_payload):
    task = make_task(organization, "SHOP-142", status="done")

    activity = processor.process(github_push_payload)

    assert activity is not None
    db.refresh(task)
    assert task.status == "done"


def test_push_without_task_reference_is_ignored(db, processor, github_push_payload):
    github_push_payload["ref"] = "refs/heads/main"
    github_push_payload["commits"] = [{"message": "tidy"}]

    assert processor.process(github_push_payload) is None
    assert db.query(TaskActivity).count() == 0


def test_unknown_task_is_ignored(db, processor, service, github_push_payload):
    assert processor.process(github_push_payload) is None
    assert db.query(TaskActivity).count() == 0


def test_lookup_is_scoped_to_repository_organization(
    db, processor, make_task, organization, other_organization, github_push_payload
):
    db.add(
        Service(
            organization_id=other_organization.id,
            name="Theirs",
            github_repository="creatia/creatia-app",
        )
    )
    db.commit()
    make_task(organization, "SHOP-142")
    theirs = make_task(other_organization, "SHOP-142")

    activity = processor.process(github_push_payload)

    assert activity.task_pk == theirs.id


def _link_repository(db, organization, full_name="creatia/creatia-app"):
    db.add(Service(organization_id=organization.id, name=organization.name, github_repository=full_name))
    db.commit()


def test_repository_linked_by_several_organizations_is_ambiguous(
    db, processor, make_task, organization, other_organization, github_push_payload
):
    _link_repository(db, organization)
    _link_repository(db, other_organization)
    make_task(organization, "SHOP-142")
    make_task(other_organization, "SHOP-142")

    assert processor.process(github_push_payload) is None
    assert db.query(TaskActivity).count() == 0


def test_repository_linked_by_several_organizations_with_one_match(
    db, processor, make_task, organization, other_organization, github_push_payload
):
    _link_repository(db, organization)
    _link_repository(db, other_organization)
    theirs = make_task(other_organization, "SHOP-142")

    activity = processor.process(github_push_payload)

    assert activity.task_pk == theirs.id


def test_linked_repository_ignores_tasks_of_unlinked_organizations(
    db, processor, make_task, organization, other_organization, github_push_payload
):
    _link_repository(db, organization)
    make_task(other_organization, "SHOP-142")

    assert processor.process(github_push_payload) is None


def test_unlinked_repository_accepts_unique_match(db, processor, make_task, organization, github_push_payload):
    task = make_task(organization, "SHOP-142")

    activity = processor.process(github_push_payload)

    assert activity.task_pk == task.id


def test_unlinked_repository_ignores_ambiguous_match(
    db, processor, make_task, organization, other_organization, github_push_payload
):
    make_task(organization, "SHOP-142")
    make_task(other_organization, "SHOP-142")

    assert processor.process(github_push_payload) is None


def test_malformed_payload_raises(processor):
    with pytest.raises(NormalizationError):
        processor.process({"ref": "refs/heads/SHOP-1"})
