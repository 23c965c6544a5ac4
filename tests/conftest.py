import mongomock
import pytest
from fastapi.testclient import TestClient

import main


@pytest.fixture
def mongo():
    return mongomock.MongoClient()["course_admin_test"]


@pytest.fixture
def client(mongo, monkeypatch):
    monkeypatch.setattr(main, "db", mongo)
    return TestClient(main.app)


def make_contact(contact_id, name, email, course, submitted_at, message="Hello"):
    return {
        "contactId": contact_id,
        "name": name,
        "email": email,
        "phone": "9876543210",
        "course": course,
        "message": message,
        "submittedAt": submitted_at,
    }


def make_enrollment(enrollment_id, name, email, title, amount, status, paid_at, enrolled_at=None, invoice="INV-1"):
    return {
        "enrollmentId": enrollment_id,
        "studentInfo": {"name": name, "email": email, "phone": "9999999999", "address": "12 Lake Road"},
        "courseInfo": {"title": title, "level": "Beginner", "fee": "₹4,999", "duration": "6 weeks"},
        "paymentInfo": {
            "amount": amount,
            "transactionId": f"txn_{enrollment_id}",
            "paymentStatus": status,
            "paymentDate": paid_at,
        },
        "invoiceInfo": {
            "invoiceNumber": invoice,
            "invoiceDate": paid_at,
            "enrollmentDate": enrolled_at or paid_at,
        },
    }
