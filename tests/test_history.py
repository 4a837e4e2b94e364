import logging

import pytest
from sqlalchemy.exc import OperationalError

from crud import history
from crud.errors import ValidationError
from models.history import History


def test_record_and_list(db, admin, member):
    history.record_for(db, member, history.REQUEST_SUBMITTED, "first")
    history.record_for(db, admin, history.ITEM_CREATED, "second")

    page = history.list_history(db, admin)
    assert page["total"] == 2
    assert [r.details for r in page["records"]] == ["second", "first"]

    own = history.list_history(db, member)
    assert own["total"] == 1
    assert own["records"][0].username == "alice"


def test_member_cannot_read_other_users_rows(db, admin, member, other_member):
    history.record_for(db, other_member, history.REGISTER)
    page = history.list_history(db, member, user_id=other_member.id)
    assert page["total"] == 0


def test_admin_filters(db, admin, member):
    history.record_for(db, member, history.REGISTER)
    history.record_for(db, member, history.REQUEST_SUBMITTED)
    history.record_for(db, admin, history.REQUEST_APPROVED)

    assert history.list_history(db, admin, user_id=member.id)["total"] == 2
    assert history.list_history(db, admin, action=history.REGISTER)["total"] == 1

    page = history.list_history(db, admin, limit=1, offset=1)
    assert len(page["records"]) == 1
    assert (page["limit"], page["offset"], page["total"]) == (1, 1, 3)


@pytest.mark.parametrize("limit", [0, 1001])
def test_limit_bounds(db, admin, limit):
    with pytest.raises(ValidationError):
        history.list_history(db, admin, limit=limit)


def test_record_failure_is_swallowed_and_logged(db, member, monkeypatch, caplog):
    def broken_commit():
        raise OperationalError("INSERT INTO history", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)
    with caplog.at_level(logging.ERROR, logger="crud.history"):
        result = history.record_for(db, member, history.REGISTER, "should not persist")

    assert result is None
    assert "Failed to record history" in caplog.text
    monkeypatch.undo()
    assert db.query(History).count() == 0
