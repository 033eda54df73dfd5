from __future__ import annotations

import logging

from flask import Flask, flash, jsonify, redirect, request, url_for
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    IngestError,
    RowNotFoundError,
    SessionLoadError,
    SessionNotFoundError,
    ValidationError,
)
from ..container import Container
from ..ingest.excel_parser import COLUMN_ALIASES, REQUIRED_COLUMNS
from .service import result_view

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = (".xlsx", ".xls")


def register(app: Flask, container: Container) -> None:
    service = container.bulk_review_service

    def _fail(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    @app.errorhandler(413)
    def upload_too_large(_e):
        limit_mb = (app.config.get("MAX_CONTENT_LENGTH") or 0) // (1024 * 1024)
        return _fail(f"File is too large (max {limit_mb} MB)", 413)

    @app.errorhandler(Exception)
    def unexpected_error(e):
        if isinstance(e, HTTPException):
            return e
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return _fail("Internal error while processing the attendance review", 500)

    @app.route("/admin/attendance/bulk-upload", methods=["GET", "POST"], endpoint="bulk_upload")
    def bulk_upload():
        if request.method == "GET":
            return jsonify({
                "success": True,
                "columns": COLUMN_ALIASES,
                "required": list(REQUIRED_COLUMNS),
            })

        file = request.files.get("file")
        if file is None or not file.filename:
            return _fail("Please choose an Excel file to upload", 400)
        if not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
            return _fail("Only .xlsx/.xls files are supported", 400)

        try:
            result = service.upload(file.stream)
        except IngestError as e:
            return _fail(str(e), 400)
        except Exception:
            logger.exception("Bulk upload failed for %s", file.filename)
            return _fail("Failed to process the uploaded file", 500)

        return jsonify({
            "success": True,
            "message": f"Parsed {result.total_records} records",
            "token": result.token,
            "total_records": result.total_records,
            "parse_errors": result.parse_errors,
            "review_url": url_for("bulk_review", token=result.token),
        }), 201

    @app.route("/admin/attendance/bulk-review/<token>", methods=["GET"], endpoint="bulk_review")
    def bulk_review(token: str):
        try:
            session = service.open_session(token)
        except SessionLoadError as e:
            flash(str(e), "danger")
            return redirect(url_for("bulk_upload"))

        return jsonify({"success": True, **service.session_view(session)})

    @app.route("/api/bulk-review/<token>/rows/<row_id>", methods=["PATCH"], endpoint="bulk_review_edit_row")
    def edit_row(token: str, row_id: str):
        payload = request.get_json(silent=True) or {}
        changes = {k: payload[k] for k in ("check_in", "check_out", "status") if k in payload}
        try:
            record = service.edit_row(token, row_id, **changes)
        except SessionNotFoundError as e:
            return _fail(str(e), 404)
        except RowNotFoundError as e:
            return _fail(str(e), 404)
        except ValidationError as e:
            return _fail(str(e), 400)

        return jsonify({"success": True, "message": "Row updated", "row": service.row_view(record)})

    @app.route(
        "/api/bulk-review/<token>/rows/<row_id>/approve",
        methods=["POST"],
        endpoint="bulk_review_approve_row",
    )
    def approve_row(token: str, row_id: str):
        try:
            result = service.approve_row(token, row_id)
        except SessionNotFoundError as e:
            return _fail(str(e), 404)
        except RowNotFoundError as e:
            return _fail(str(e), 404)
        except ValidationError as e:
            return _fail(str(e), 400)

        if not result.success:
            return jsonify({"message": result.error or "Failed to mark attendance", **result_view(result)}), 500
        return jsonify({"message": "Attendance marked", **result_view(result)})

    @app.route("/api/bulk-review/<token>/rows/<row_id>/skip", methods=["POST"], endpoint="bulk_review_skip_row")
    def skip_row(token: str, row_id: str):
        try:
            removed = service.skip_row(token, row_id)
        except SessionNotFoundError as e:
            return _fail(str(e), 404)
        except ValidationError as e:
            return _fail(str(e), 400)

        return jsonify({
            "success": True,
            "removed": removed,
            "message": "Row skipped" if removed else "Row was already removed",
        })

    @app.route("/api/bulk-review/<token>/approve-all", methods=["POST"], endpoint="bulk_review_approve_all")
    def approve_all(token: str):
        try:
            result = service.approve_all(token)
        except SessionNotFoundError as e:
            return _fail(str(e), 404)
        except ValidationError as e:
            return _fail(str(e), 400)

        message = f"Successfully marked {result.success_count} records"
        if result.failed_count:
            message += f", {result.failed_count} failed"
        return jsonify({
            "success": result.success_count > 0,
            "message": message,
            "success_count": result.success_count,
            "failed_count": result.failed_count,
            "errors": [
                {"row_id": e.row_id, "employee_id": e.employee_id, "date": e.date.isoformat(), "error": e.error}
                for e in result.errors
            ],
            "session_closed": result.session_closed,
            "remaining": [service.row_view(r) for r in result.remaining],
        })

    @app.route("/api/bulk-review/<token>", methods=["DELETE"], endpoint="bulk_review_cancel")
    def cancel(token: str):
        if not service.cancel(token):
            return _fail("Review session not found or expired", 404)
        return jsonify({"success": True, "message": "Review cancelled"})
