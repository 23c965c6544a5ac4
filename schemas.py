"""
Database Schemas for the Course Admin Console

Each Pydantic model describes a document stored in MongoDB. The documents are
written by the public site's submission pipeline; this backend only reads them.
- Contact    -> "contacts" collection
- Enrollment -> "enrollments" collection

Timestamps arrive either as ISO-8601 strings or as BSON dates, and phone
numbers or references are sometimes stored as numbers, so those fields accept
both. DashboardData and PaymentStats are derived on every request and never stored.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Optional, Literal, Union

CONTACTS = "contacts"
ENROLLMENTS = "enrollments"

PaymentStatus = Literal["success", "pending", "failed"]

Timestamp = Optional[Union[str, datetime]]
Reference = Optional[Union[str, int]]


def coerce_amount(value: Any) -> float:
    """Payment amount as a number; missing or non-numeric amounts count as 0."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


class Document(BaseModel):
    model_config = ConfigDict(extra="allow")


class Contact(Document):
    """Inquiry submitted through the website contact form"""
    contactId: Reference = Field(None, description="Public contact reference")
    name: Optional[str] = Field(None)
    email: Optional[str] = Field(None)
    phone: Reference = Field(None)
    course: Optional[str] = Field(None, description="Course the inquiry is about")
    message: Optional[str] = Field(None)
    submittedAt: Timestamp = Field(None, description="Submission timestamp")


class StudentInfo(Document):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Reference = None
    address: Optional[str] = None


class CourseInfo(Document):
    title: Optional[str] = None
    level: Optional[str] = None
    hindiName: Optional[str] = None
    fee: Optional[Union[str, float]] = Field(None, description="Fee label as displayed on the site")
    duration: Optional[str] = None
    sessions: Optional[str] = None
    technique: Optional[str] = None
    color: Optional[str] = None


class PaymentInfo(Document):
    amount: float = Field(0, description="Amount paid")
    transactionId: Reference = None
    razorpayPaymentId: Reference = None
    paymentStatus: Optional[str] = Field(None, description="success | pending | failed")
    paymentDate: Timestamp = Field(None, description="Payment timestamp")

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value):
        return coerce_amount(value)


class InvoiceInfo(Document):
    invoiceNumber: Reference = None
    invoiceDate: Timestamp = None
    enrollmentDate: Timestamp = None


class Enrollment(Document):
    """Paid course registration"""
    enrollmentId: Reference = Field(None)
    studentInfo: StudentInfo = Field(default_factory=StudentInfo)
    courseInfo: CourseInfo = Field(default_factory=CourseInfo)
    paymentInfo: PaymentInfo = Field(default_factory=PaymentInfo)
    invoiceInfo: InvoiceInfo = Field(default_factory=InvoiceInfo)
    enrollmentDate: Timestamp = Field(None, description="Legacy top-level enrollment timestamp")


class PaymentStats(BaseModel):
    """Successful payment totals per calendar window"""
    today: float = 0
    thisWeek: float = 0
    thisMonth: float = 0
    thisYear: float = 0


class DashboardData(BaseModel):
    totalContacts: int = 0
    totalEnrollments: int = 0
    totalRevenue: float = 0
    recentContacts: int = Field(0, description="Contacts submitted in the last 7 days")
    recentEnrollments: int = Field(0, description="Enrollments created in the last 7 days")
    recentRevenue: float = Field(0, description="Successful payments in the last 7 days")
    paymentStats: PaymentStats = Field(default_factory=PaymentStats)
