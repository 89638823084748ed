from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_user_id, student_required, teacher_required
from ..common.http import json_body
from ..container import Container
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/requests", methods=["GET"], endpoint="pending_requests")
    @teacher_required
    def pending_requests():
        teacher_id = request.args.get("teacherId") or current_user_id()
        if teacher_id != current_user_id():
            raise AuthorizationError("You can only view your own requests")
        reqs = container.join_request_service.list_pending_for_teacher(teacher_id)
        return jsonify([r.to_dict() for r in reqs])

    @app.route("/api/requests/mine", methods=["GET"], endpoint="my_requests")
    @student_required
    def my_requests():
        reqs = container.join_request_service.list_for_student(current_user_id())
        return jsonify([r.to_dict() for r in reqs])

    @app.route("/api/requests", methods=["POST"], endpoint="submit_request")
    @student_required
    def submit_request():
        data = json_body()
        student_id = data.get("studentId") or current_user_id()
        if student_id != current_user_id():
            raise AuthorizationError("You can only send requests for yourself")

        req = container.join_request_service.submit(
            student_id=student_id,
            teacher_id=data.get("teacherId"),
            request_id=data.get("id"),
        )
        return jsonify(req.to_dict()), 201

    @app.route("/api/requests/respond", methods=["POST"], endpoint="respond_request")
    @teacher_required
    def respond_request():
        data = json_body()
        req = container.join_request_service.respond(
            request_id=data.get("requestId"),
            status=data.get("status"),
            responder_id=current_user_id(),
        )
        return jsonify(req.to_dict())
