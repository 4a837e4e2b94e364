from datetime import datetime, timedelta

import pytest

from conftest import make_item
from crud import reports
from models.borrowing import Borrowing, Request
from models.inventory import Transaction, TransactionType

API = "/api/v1"
NOW = datetime(2026, 5, 20, 12, 0)


@pytest.fixture
def activity(db, member):
    scope = make_item(db, "Oscilloscope", quantity=10, category="Electronics")
    make_item(db, "Drill", quantity=5, category="Tools")
    make_item(db, "Bench PSU", quantity=5, category="Electronics")
    db.add_all([
        Transaction(item_id=scope.id, user_id=member.id, type=TransactionType.ISSUE, quantity=2,
                    date=datetime(2026, 4, 10)),
        Transaction(item_id=scope.id, user_id=member.id, type=TransactionType.RETURN, quantity=2,
                    date=datetime(2026, 5, 2)),
        Borrowing(user_id=member.id, item_id=scope.id, tool_name="Oscilloscope", quantity=3,
                  borrowed_at=datetime(2026, 5, 5), returned_at=datetime(2026, 5, 9)),
        Borrowing(user_id=member.id, item_id=scope.id, tool_name="Oscilloscope", quantity=1,
                  borrowed_at=datetime(2026, 5, 18)),
        Request(user_id=member.id, title="a", tool_name="Oscilloscope", quantity=1, requested_at=datetime(2026, 5, 3)),
        Request(user_id=member.id, title="b", tool_name="Oscilloscope", quantity=1, requested_at=datetime(2026, 5, 4)),
        Request(user_id=member.id, title="c", tool_name="Drill", quantity=1, requested_at=datetime(2026, 5, 6)),
    ])
    db.commit()


def test_monthly_tool_activity(db, activity):
    months = reports.monthly_tool_activity(db, months=3, now=NOW)
    assert months == [
        {"month": "2026-03", "issued": 0, "returned": 0},
        {"month": "2026-04", "issued": 2, "returned": 0},
        {"month": "2026-05", "issued": 4, "returned": 5},
    ]


def test_monthly_tool_activity_without_data(db):
    months = reports.monthly_tool_activity(db, months=2, now=NOW)
    assert [m["issued"] for m in months] == [0, 0]


def test_category_distribution(db, activity):
    assert reports.category_distribution(db) == [
        {"category": "Electronics", "item_count": 2, "quantity": 15},
        {"category": "Tools", "item_count": 1, "quantity": 5},
    ]


def test_weekly_utilization(db, activity):
    weeks = reports.weekly_utilization(db, weeks=2, now=NOW)
    assert [w["week"] for w in weeks] == ["2026-05-13", "2026-05-20"]
    assert weeks[0]["on_loan"] == 0
    assert weeks[1]["on_loan"] == 1
    assert weeks[1]["utilization"] == 5.0


def test_summary_stats(db, activity):
    stats = reports.summary_stats(db, now=NOW)
    assert stats["total_issues_this_month"] == 2
    assert stats["trend_percent"] == 100.0
    assert stats["average_borrow_days"] == 4.0
    assert stats["most_requested"] == "Oscilloscope"
    assert stats["most_requested_count"] == 2
    assert stats["return_rate"] == 50.0


def test_summary_stats_empty(db):
    stats = reports.summary_stats(db, now=NOW)
    assert stats["total_issues_this_month"] == 0
    assert stats["most_requested"] is None
    assert stats["return_rate"] == 0.0


@pytest.mark.parametrize("report_type", ["inventory", "borrowings", "history"])
def test_export_pdf_and_excel(client, db, activity, admin_headers, report_type):
    pdf = client.get(f"{API}/reports/export/{report_type}?format=pdf", headers=admin_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    excel = client.get(f"{API}/reports/export/{report_type}?format=excel", headers=admin_headers)
    assert excel.status_code == 200
    assert excel.content.startswith(b"PK")
    assert f"{report_type}-" in excel.headers["content-disposition"]


def test_export_unknown_report(client, admin_headers):
    response = client.get(f"{API}/reports/export/payroll", headers=admin_headers)
    assert response.status_code == 400


def test_reports_are_admin_only(client, member_headers):
    assert client.get(f"{API}/reports/summary", headers=member_headers).status_code == 403
