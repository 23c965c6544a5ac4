"""
Spreadsheet export

Builds an .xlsx workbook from the records an operator is currently looking
at. Rows carry human-readable column labels; dates are rendered the way the
console displays them (en-US locale) and currency is written as the raw amount.
"""

import io
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from schemas import Contact, Enrollment
from stats import parse_timestamp

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CONTACT_COLUMNS = [
    "Contact ID",
    "Name",
    "Email",
    "Phone",
    "Course",
    "Message",
    "Submitted At",
]

ENROLLMENT_COLUMNS = [
    "Enrollment ID",
    "Student Name",
    "Student Email",
    "Student Phone",
    "Student Address",
    "Course Title",
    "Course Level",
    "Course Fee",
    "Course Duration",
    "Payment Amount",
    "Payment Status",
    "Payment Date",
    "Invoice Number",
    "Enrollment Date",
]


def format_date(value: Any) -> str:
    """M/D/YYYY, or the original value when it is not a timestamp."""
    ts = parse_timestamp(value)
    if ts is None:
        return "" if value is None else str(value)
    return f"{ts.month}/{ts.day}/{ts.year}"


def format_datetime(value: Any) -> str:
    """M/D/YYYY, h:MM:SS AM"""
    ts = parse_timestamp(value)
    if ts is None:
        return "" if value is None else str(value)
    hour = ts.hour % 12 or 12
    suffix = "AM" if ts.hour < 12 else "PM"
    return f"{ts.month}/{ts.day}/{ts.year}, {hour}:{ts.minute:02d}:{ts.second:02d} {suffix}"


def contact_rows(contacts: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    rows = []
    for doc in contacts:
        contact = Contact.model_validate(doc)
        rows.append({
            "Contact ID": contact.contactId,
            "Name": contact.name,
            "Email": contact.email,
            "Phone": contact.phone,
            "Course": contact.course,
            "Message": contact.message,
            "Submitted At": format_datetime(contact.submittedAt),
        })
    return rows


def enrollment_rows(enrollments: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    rows = []
    for doc in enrollments:
        e = Enrollment.model_validate(doc)
        enrolled_on = e.invoiceInfo.enrollmentDate or e.enrollmentDate
        rows.append({
            "Enrollment ID": e.enrollmentId,
            "Student Name": e.studentInfo.name,
            "Student Email": e.studentInfo.email,
            "Student Phone": e.studentInfo.phone,
            "Student Address": e.studentInfo.address,
            "Course Title": e.courseInfo.title,
            "Course Level": e.courseInfo.level,
            "Course Fee": e.courseInfo.fee,
            "Course Duration": e.courseInfo.duration,
            "Payment Amount": e.paymentInfo.amount,
            "Payment Status": e.paymentInfo.paymentStatus,
            "Payment Date": format_date(e.paymentInfo.paymentDate),
            "Invoice Number": e.invoiceInfo.invoiceNumber,
            "Enrollment Date": format_date(enrolled_on),
        })
    return rows


def build_workbook(rows: List[Dict[str, Any]], sheet_name: str, columns: List[str]) -> bytes:
    """Write `rows` to a single-sheet workbook and return the file bytes."""
    df = pd.DataFrame(rows, columns=columns)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return buffer.getvalue()


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"{prefix}_{today.isoformat()}.xlsx"
