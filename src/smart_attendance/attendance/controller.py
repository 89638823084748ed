from __future__ import annotations

import csv
import io

from flask import Flask, current_app, jsonify, request
from PIL import Image

from ..common.auth import current_role, current_user_id, login_required, roles_required, teacher_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from .qr import decode_image

_CSV_FIELDS = ["date", "studentId", "studentName", "subject", "teacherId", "status", "timestamp"]


def register(app: Flask, container: Container) -> None:
    def _student_scope() -> str | None:
        """Students only ever see their own records."""
        requested = request.args.get("studentId") or None
        if current_role() == Role.STUDENT:
            if requested and requested != current_user_id():
                raise AuthorizationError("You can only view your own attendance")
            return current_user_id()
        return requested

    def _query_args():
        return dict(
            student_id=_student_scope(),
            teacher_id=request.args.get("teacherId") or None,
            subject=request.args.get("subject") or None,
            start_date=request.args.get("startDate") or None,
            end_date=request.args.get("endDate") or None,
        )

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        records = container.attendance_service.query(**_query_args())
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance", methods=["POST"], endpoint="mark_attendance")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def mark_attendance():
        data = json_body()
        teacher_id = current_user_id()
        if current_role() == Role.ADMIN:
            teacher_id = data.get("teacherId") or teacher_id

        rec = container.attendance_service.record(
            student_id=data.get("studentId"),
            subject=data.get("subject"),
            date=data.get("date"),
            teacher_id=teacher_id,
            status=data.get("status"),
            timestamp=data.get("timestamp"),
            record_id=data.get("id"),
            student_name=data.get("studentName"),
        )
        return jsonify(rec.to_dict()), 201

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="scan_attendance")
    @teacher_required
    def scan_attendance():
        """Accepts ``{"code", "subject"}`` JSON or a multipart ``image`` upload plus ``subject``."""

        if "image" in request.files:
            subject = request.form.get("subject")
            try:
                code = decode_image(
                    request.files["image"].stream,
                    max_frames=current_app.config["QR_MAX_FRAMES"],
                )
            except (OSError, Image.DecompressionBombError):
                # OSError covers PIL.UnidentifiedImageError and truncated files
                raise ValidationError("Invalid image file")
            if not code:
                raise ValidationError("No QR code detected in image")
        else:
            data = json_body()
            subject = data.get("subject")
            code = data.get("code")

        rec = container.attendance_service.record_scan(
            teacher_id=current_user_id(),
            subject=subject,
            code=code,
        )
        return jsonify(rec.to_dict()), 201

    @app.route("/api/attendance/export", methods=["GET"], endpoint="export_attendance")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def export_attendance():
        records = container.attendance_service.query(**_query_args())

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS, extrasaction="ignore")
        writer.writeheader()
        for r in records:
            writer.writerow(r.to_dict())

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=attendance.csv"},
        )

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def attendance_stats():
        days = container.attendance_service.daily_stats(
            subject=request.args.get("subject") or None,
            teacher_id=request.args.get("teacherId") or None,
        )
        return jsonify([d.to_dict() for d in days])

    @app.route("/api/attendance/summary/<student_id>", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary(student_id: str):
        if current_role() == Role.STUDENT and student_id != current_user_id():
            raise AuthorizationError("You can only view your own attendance")
        summary = container.attendance_service.student_summary(
            student_id,
            subject=request.args.get("subject") or None,
        )
        return jsonify(summary.to_dict())
