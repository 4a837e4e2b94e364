import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401
from crud import ledger, tool_requests
from crud.errors import InsufficientStock, InvalidState
from database import Base
from models.borrowing import Borrowing, Request, RequestStatus
from models.inventory import Item
from models.project import Project
from models.user import User, UserRole


@pytest.fixture
def session_factory(tmp_path):
    """File-backed database so each thread gets its own connection"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def run_concurrently(session_factory, action, count=2):
    barrier = threading.Barrier(count)
    outcomes = [None] * count

    def worker(index):
        session = session_factory()
        try:
            barrier.wait()
            outcomes[index] = action(session)
        except Exception as e:
            outcomes[index] = e
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def seed(session_factory, available=5):
    session = session_factory()
    admin = User(username="admin", password_hash="x$y", role=UserRole.ADMIN, full_name="Admin", email="a@example.com")
    member = User(username="alice", password_hash="x$y", full_name="Alice", email="alice@example.com")
    item = Item(name="Oscilloscope", quantity=available, available_quantity=available)
    project = Project(name="Rover")
    session.add_all([admin, member, item, project])
    session.commit()
    ids = admin.id, member.id, item.id, project.id
    session.close()
    return ids


def test_concurrent_allocations_cannot_oversell(session_factory):
    _, _, item_id, project_id = seed(session_factory, available=5)

    outcomes = run_concurrently(session_factory, lambda s: ledger.allocate(s, item_id, project_id, 3))

    failures = [o for o in outcomes if isinstance(o, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)

    session = session_factory()
    item = session.get(Item, item_id)
    assert item.available_quantity == 2
    session.close()


def test_concurrent_approvals_only_one_wins(session_factory):
    admin_id, member_id, item_id, _ = seed(session_factory, available=5)
    session = session_factory()
    request = Request(user_id=member_id, title="Scope", tool_name="Oscilloscope", quantity=1,
                      status=RequestStatus.PENDING)
    session.add(request)
    session.commit()
    request_id = request.id
    session.close()

    def approve(s):
        return tool_requests.approve(s, request_id, s.get(User, admin_id))

    outcomes = run_concurrently(session_factory, approve)

    failures = [o for o in outcomes if isinstance(o, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InvalidState)

    session = session_factory()
    assert session.get(Item, item_id).available_quantity == 4
    assert session.query(Borrowing).count() == 1
    assert session.get(Request, request_id).status == RequestStatus.APPROVED
    session.close()
