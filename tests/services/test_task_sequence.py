from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from tasklink.core.exceptions import SequenceAllocationError
from tasklink.models import Organization, Service
from tasklink.services.task_sequence import TaskSequenceAllocator, format_task_id


@pytest.mark.parametrize(
    "sequence, expected",
    [(1, "SHOP-001"), (42, "SHOP-042"), (999, "SHOP-999"), (1000, "SHOP-1000"), (123456, "SHOP-123456")],
)
def test_format_task_id(sequence, expected):
    assert format_task_id("SHOP", sequence) == expected


def test_prefix_prefers_service_then_organization_then_default(db, organization):
    allocator = TaskSequenceAllocator(db)
    service = Service(organization_id=organization.id, name="Cart", task_prefix="CART")
    bare_service = Service(organization_id=organization.id, name="Bare")

    assert allocator.task_prefix(organization, service) == "CART"
    assert allocator.task_prefix(organization, bare_service) == "SHOP"
    assert allocator.task_prefix(organization) == "SHOP"

    organization.task_prefix = None
    assert allocator.task_prefix(organization) == "TASK"


def test_sequential_task_ids(db, organization):
    allocator = TaskSequenceAllocator(db)

    ids = [allocator.next_task_id(organization) for _ in range(3)]
    db.commit()

    assert ids == ["SHOP-001", "SHOP-002", "SHOP-003"]
    db.refresh(organization)
    assert organization.task_sequence == 3


def test_counter_is_per_organization(db, organization, other_organization):
    allocator = TaskSequenceAllocator(db)

    assert allocator.next_task_id(organization) == "SHOP-001"
    assert allocator.next_task_id(other_organization) == "TASK-001"
    assert allocator.next_task_id(organization) == "SHOP-002"


def test_missing_organization_raises(db):
    allocator = TaskSequenceAllocator(db)

    with pytest.raises(SequenceAllocationError):
        allocator.next_sequence(9999)


def test_retries_on_lock_contention_then_succeeds():
    db = Mock()
    repo = Mock()
    locked = OperationalError("UPDATE organizations", {}, Exception("database is locked"))
    repo.increment_task_sequence.side_effect = [locked, locked, 7]
    allocator = TaskSequenceAllocator(db, organization_repo=repo, max_attempts=3, backoff_seconds=0)

    assert allocator.next_sequence(1) == 7
    assert repo.increment_task_sequence.call_count == 3
    assert db.rollback.call_count == 2


def test_retry_exhaustion_is_fatal():
    db = Mock()
    repo = Mock()
    repo.increment_task_sequence.side_effect = OperationalError(
        "UPDATE organizations", {}, Exception("database is locked")
    )
    allocator = TaskSequenceAllocator(db, organization_repo=repo, max_attempts=4, backoff_seconds=0)

    with pytest.raises(SequenceAllocationError):
        allocator.next_sequence(1)
    assert repo.increment_task_sequence.call_count == 4


def test_concurrent_allocation_yields_distinct_sequences(db, organization, session_factory):
    organization_id = organization.id
    workers, per_worker = 8, 5

    def allocate_many():
        session = session_factory()
        allocator = TaskSequenceAllocator(session, max_attempts=50, backoff_seconds=0.01)
        values = []
        try:
            for _ in range(per_worker):
                values.append(allocator.next_sequence(organization_id))
                session.commit()
        finally:
            session.close()
        return values

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = [f.result() for f in [pool.submit(allocate_many) for _ in range(workers)]]

    allocated = [value for values in results for value in values]
    total = workers * per_worker
    assert len(allocated) == total
    assert sorted(allocated) == list(range(1, total + 1))

    db.expire_all()
    assert db.get(Organization, organization_id).task_sequence == total
