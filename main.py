import io
import logging
import os
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

from database import db
from export import (
    CONTACT_COLUMNS,
    ENROLLMENT_COLUMNS,
    XLSX_MEDIA_TYPE,
    build_workbook,
    contact_rows,
    enrollment_rows,
    export_filename,
)
from queries import course_titles, find_contacts, find_enrollments
from stats import dashboard_data, payment_stats

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Course Admin Console API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --------- Utilities ---------

def serialize_doc(doc: dict):
    if not doc:
        return doc
    out = {}
    for k, v in doc.items():
        if k == "_id":
            out["id"] = str(v)
        elif isinstance(v, dict):
            out[k] = serialize_doc(v)
        elif isinstance(v, datetime):
            # BSON dates come back naive but in UTC
            out[k] = (v if v.tzinfo else v.replace(tzinfo=timezone.utc)).isoformat()
        elif isinstance(v, date):
            out[k] = v.isoformat()
        else:
            out[k] = v
    return out


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def db_unavailable() -> JSONResponse:
    return error_response("Database not configured", status_code=503)


def xlsx_response(content: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --------- Contacts ---------
# Handlers are plain `def`: pymongo blocks, so FastAPI runs them in its threadpool.

@app.get("/api/contacts")
def list_contacts(search: Optional[str] = None):
    if db is None:
        return db_unavailable()
    try:
        docs = find_contacts(db, search)
    except Exception:
        logger.exception("Error fetching contacts")
        return error_response("Failed to fetch contacts")
    return {"success": True, "data": [serialize_doc(d) for d in docs]}


@app.get("/api/contacts/export")
def export_contacts(search: Optional[str] = None):
    if db is None:
        return db_unavailable()
    try:
        docs = find_contacts(db, search)
        content = build_workbook(contact_rows(docs), "Contacts", CONTACT_COLUMNS)
    except Exception:
        logger.exception("Error exporting contacts")
        return error_response("Failed to export contacts")
    logger.info("Exported %d contacts", len(docs))
    return xlsx_response(content, export_filename("contacts"))


# --------- Enrollments ---------

@app.get("/api/enrollments")
def list_enrollments(search: Optional[str] = None, course: Optional[str] = None):
    if db is None:
        return db_unavailable()
    try:
        docs = find_enrollments(db, search, course)
    except Exception:
        logger.exception("Error fetching enrollments")
        return error_response("Failed to fetch enrollments")
    return {
        "success": True,
        "data": [serialize_doc(d) for d in docs],
        "stats": payment_stats(docs).model_dump(),
    }


@app.get("/api/enrollments/courses")
def list_courses():
    if db is None:
        return db_unavailable()
    try:
        docs = find_enrollments(db)
    except Exception:
        logger.exception("Error fetching courses")
        return error_response("Failed to fetch courses")
    return {"success": True, "data": course_titles(docs)}


@app.get("/api/enrollments/export")
def export_enrollments(search: Optional[str] = None, course: Optional[str] = None):
    if db is None:
        return db_unavailable()
    try:
        docs = find_enrollments(db, search, course)
        content = build_workbook(enrollment_rows(docs), "Enrollments", ENROLLMENT_COLUMNS)
    except Exception:
        logger.exception("Error exporting enrollments")
        return error_response("Failed to export enrollments")
    logger.info("Exported %d enrollments", len(docs))
    return xlsx_response(content, export_filename("enrollments"))


# --------- Dashboard ---------

@app.get("/api/dashboard")
def get_dashboard():
    if db is None:
        return db_unavailable()
    try:
        data = dashboard_data(db)
    except Exception:
        logger.exception("Error fetching dashboard data")
        return error_response("Failed to fetch dashboard data")
    return {"success": True, "data": data.model_dump()}


# --------- Health/Test ---------

@app.get("/")
def read_root():
    return {"message": "Course Admin Console API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["database_url"] = "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set"
            response["database_name"] = "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set"
            response["connection_status"] = "Connected"
            try:
                response["collections"] = db.list_collection_names()[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️  Connected but Error: {str(e)[:80]}"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
