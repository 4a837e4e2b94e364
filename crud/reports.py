import logging
from datetime import datetime, timedelta
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from config import settings
from crud.errors import ValidationError
from models.borrowing import Borrowing, Request
from models.history import History
from models.inventory import Item, Transaction, TransactionType
from models.user import User

logger = logging.getLogger(__name__)

EXPORT_TYPES = ("inventory", "borrowings", "history")


def _month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _issue_events(db: Session, since: datetime) -> pd.DataFrame:
    """Issued quantities from both direct issues and borrowings, one row per event."""
    events = [
        {"date": t.date, "quantity": t.quantity}
        for t in db.query(Transaction).filter(
            Transaction.type == TransactionType.ISSUE, Transaction.date >= since)
    ]
    events += [
        {"date": b.borrowed_at, "quantity": b.quantity}
        for b in db.query(Borrowing).filter(Borrowing.borrowed_at >= since)
    ]
    df = pd.DataFrame(events, columns=["date", "quantity"])
    df["date"] = pd.to_datetime(df["date"])
    return df


def _borrowings_frame(db: Session) -> pd.DataFrame:
    rows = db.query(Borrowing.borrowed_at, Borrowing.returned_at, Borrowing.quantity).all()
    df = pd.DataFrame(rows, columns=["borrowed_at", "returned_at", "quantity"])
    df["borrowed_at"] = pd.to_datetime(df["borrowed_at"])
    df["returned_at"] = pd.to_datetime(df["returned_at"])
    return df


def monthly_tool_activity(db: Session, months: int = 6, now: Optional[datetime] = None) -> List[dict]:
    now = now or datetime.now()
    first = pd.Timestamp(now).to_period("M") - (months - 1)
    start = first.to_timestamp().to_pydatetime()

    events = []
    for t in db.query(Transaction).filter(Transaction.date >= start):
        issued = t.quantity if t.type == TransactionType.ISSUE else 0
        events.append({"date": t.date, "issued": issued, "returned": t.quantity - issued})
    for b in db.query(Borrowing).filter(or_(Borrowing.borrowed_at >= start, Borrowing.returned_at >= start)):
        if b.borrowed_at >= start:
            events.append({"date": b.borrowed_at, "issued": b.quantity, "returned": 0})
        if b.returned_at is not None and b.returned_at >= start:
            events.append({"date": b.returned_at, "issued": 0, "returned": b.quantity})

    df = pd.DataFrame(events, columns=["date", "issued", "returned"])
    df["month"] = pd.to_datetime(df["date"]).dt.to_period("M")
    grouped = df.groupby("month")[["issued", "returned"]].sum()
    grouped = grouped.reindex(pd.period_range(start=first, periods=months, freq="M"), fill_value=0)

    return [
        {"month": str(period), "issued": int(row["issued"]), "returned": int(row["returned"])}
        for period, row in grouped.iterrows()
    ]


def category_distribution(db: Session) -> List[dict]:
    df = pd.DataFrame(db.query(Item.category, Item.quantity).all(), columns=["category", "quantity"])
    if df.empty:
        return []

    df["category"] = df["category"].where(df["category"].notna() & (df["category"] != ""), "Uncategorized")
    grouped = (
        df.groupby("category")
        .agg(item_count=("quantity", "size"), quantity=("quantity", "sum"))
        .reset_index()
        .sort_values(["quantity", "category"], ascending=[False, True])
    )
    return [
        {"category": row.category, "item_count": int(row.item_count), "quantity": int(row.quantity)}
        for row in grouped.itertuples()
    ]


def weekly_utilization(db: Session, weeks: int = 8, now: Optional[datetime] = None) -> List[dict]:
    """Share of total stock out on loan at the end of each of the last ``weeks`` weeks."""
    now = now or datetime.now()
    total = db.query(func.coalesce(func.sum(Item.quantity), 0)).scalar() or 0
    df = _borrowings_frame(db)

    result = []
    for week_end in pd.date_range(end=pd.Timestamp(now), periods=weeks, freq="7D"):
        open_at_end = (df["borrowed_at"] <= week_end) & (df["returned_at"].isna() | (df["returned_at"] > week_end))
        on_loan = int(df.loc[open_at_end, "quantity"].sum())
        result.append({
            "week": week_end.strftime("%Y-%m-%d"),
            "on_loan": on_loan,
            "utilization": round(100.0 * on_loan / total, 1) if total else 0.0,
        })
    return result


def summary_stats(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    month_start = _month_start(now)
    previous_start = _month_start(month_start - timedelta(days=1))

    issues = _issue_events(db, previous_start)
    this_month = int((issues["date"] >= month_start).sum())
    last_month = int((issues["date"] < month_start).sum())
    if last_month:
        trend = round(100.0 * (this_month - last_month) / last_month, 1)
    else:
        trend = 100.0 if this_month else 0.0

    borrowings = _borrowings_frame(db)
    returned = borrowings.dropna(subset=["returned_at"])
    if returned.empty:
        average_days = 0.0
    else:
        durations = (returned["returned_at"] - returned["borrowed_at"]).dt.total_seconds() / 86400
        average_days = round(float(durations.mean()), 1)
    return_rate = round(100.0 * len(returned) / len(borrowings), 1) if len(borrowings) else 0.0

    requested = pd.Series(
        [name for (name,) in db.query(Request.tool_name).filter(Request.requested_at >= month_start)],
        dtype="object",
    )
    if requested.empty:
        most_requested, most_requested_count = None, 0
    else:
        counts = requested.value_counts()
        most_requested, most_requested_count = counts.index[0], int(counts.iloc[0])

    return {
        "total_issues_this_month": this_month,
        "trend_percent": trend,
        "trend_text": f"{trend:+.1f}% vs last month",
        "average_borrow_days": average_days,
        "most_requested": most_requested,
        "most_requested_count": most_requested_count,
        "return_rate": return_rate,
    }


def _fmt(value) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    return str(value)


def build_export_data(db: Session, report_type: str) -> dict:
    if report_type == "inventory":
        columns = ["ID", "Name", "Category", "Cabinet", "Quantity", "Available"]
        rows = [
            [i.id, i.name, i.category, i.cabinet, i.quantity, i.available_quantity]
            for i in db.query(Item).order_by(Item.name.asc())
        ]
        title = "Inventory Report"
    elif report_type == "borrowings":
        columns = ["ID", "Tool", "User", "Quantity", "Borrowed", "Expected Return", "Returned"]
        rows = [
            [b.id, b.tool_name, username, b.quantity, b.borrowed_at, b.expected_return_date, b.returned_at]
            for b, username in db.query(Borrowing, User.username)
            .join(User, Borrowing.user_id == User.id)
            .order_by(Borrowing.borrowed_at.desc())
        ]
        title = "Borrowings Report"
    elif report_type == "history":
        columns = ["ID", "Timestamp", "User", "Action", "Details"]
        rows = [
            [h.id, h.timestamp, h.username, h.action, h.details]
            for h in db.query(History).order_by(History.timestamp.desc(), History.id.desc())
        ]
        title = "Activity History"
    else:
        raise ValidationError("Invalid report type")

    return {
        "title": title,
        "generated_at": datetime.now(),
        "columns": columns,
        "rows": [[_fmt(value) for value in row] for row in rows],
    }


def generate_pdf_report(report_type: str, data: dict) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(letter),
        rightMargin=36,
        leftMargin=36,
        topMargin=48,
        bottomMargin=48
    )
    elements = []
    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'TitleStyle',
        parent=styles['Title'],
        fontSize=16,
        textColor=colors.navy,
        spaceAfter=12
    )
    subtitle_style = ParagraphStyle(
        'SubtitleStyle',
        parent=styles['Heading2'],
        fontSize=11,
        textColor=colors.navy,
        spaceAfter=6
    )
    cell_style = ParagraphStyle('CellStyle', parent=styles['Normal'], fontSize=8, leading=10)

    elements.append(Paragraph(settings.PROJECT_NAME, title_style))
    elements.append(Paragraph(data["title"], title_style))
    elements.append(Paragraph(f"Generated {data['generated_at'].strftime('%d %B %Y %H:%M')}", subtitle_style))
    elements.append(Spacer(1, 12))

    table_data = [data["columns"]]
    # wrap long text so the table stays on the page
    table_data += [[Paragraph(escape(value), cell_style) for value in row] for row in data["rows"]]
    if not data["rows"]:
        table_data.append(["No records"] + [""] * (len(data["columns"]) - 1))

    column_width = doc.width / len(data["columns"])
    table = Table(table_data, colWidths=[column_width] * len(data["columns"]), repeatRows=1)
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
        ('LINEBELOW', (0, 0), (-1, 0), 1, colors.black),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]))
    elements.append(table)

    def add_page_number(canvas, doc):
        page_size = landscape(letter)
        canvas.setFont('Helvetica', 8)
        canvas.drawRightString(page_size[0] - 0.5 * inch, 0.5 * inch, f"Page {canvas.getPageNumber()}")
        canvas.drawString(0.5 * inch, 0.5 * inch, report_type)

    doc.build(elements, onFirstPage=add_page_number, onLaterPages=add_page_number)
    pdf_data = buffer.getvalue()
    buffer.close()
    return pdf_data


def generate_excel_report(report_type: str, data: dict) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = report_type.capitalize()

    title_font = Font(name='Arial', size=14, bold=True, color='000080')
    subtitle_font = Font(name='Arial', size=11, bold=True, color='000080')
    header_font = Font(name='Arial', size=11, bold=True)
    normal_font = Font(name='Arial', size=10)
    header_fill = PatternFill(start_color='E0E0E0', end_color='E0E0E0', fill_type='solid')
    border = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    ws["A1"] = data["title"]
    ws["A1"].font = title_font
    ws["A2"] = f"Generated {data['generated_at'].strftime('%d %B %Y %H:%M')}"
    ws["A2"].font = subtitle_font

    header_row = 4
    for col, name in enumerate(data["columns"], start=1):
        cell = ws.cell(row=header_row, column=col, value=name)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = border
        cell.alignment = Alignment(horizontal='center')

    for offset, row in enumerate(data["rows"], start=1):
        for col, value in enumerate(row, start=1):
            cell = ws.cell(row=header_row + offset, column=col, value=value)
            cell.font = normal_font
            cell.border = border

    for col, name in enumerate(data["columns"], start=1):
        longest = max([len(name)] + [len(row[col - 1]) for row in data["rows"]])
        ws.column_dimensions[get_column_letter(col)].width = min(max(12, longest + 2), 60)

    buffer = BytesIO()
    wb.save(buffer)
    excel_data = buffer.getvalue()
    buffer.close()
    return excel_data


def export_report(db: Session, report_type: str, fmt: str):
    """Render a report; returns ``(content, media_type, filename)``."""
    data = build_export_data(db, report_type)
    stamp = data["generated_at"].strftime("%Y%m%d")
    if fmt == "pdf":
        content = generate_pdf_report(report_type, data)
        media_type = "application/pdf"
        filename = f"{report_type}-{stamp}.pdf"
    else:
        content = generate_excel_report(report_type, data)
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        filename = f"{report_type}-{stamp}.xlsx"
    logger.info("Exported %s report as %s (%s rows)", report_type, fmt, len(data["rows"]))
    return content, media_type, filename
