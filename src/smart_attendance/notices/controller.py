from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, roles_required, teacher_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notices", methods=["GET"], endpoint="list_notices")
    @login_required
    def list_notices():
        student_id = request.args.get("studentId") or None
        if current_role() == Role.STUDENT:
            student_id = current_user_id()
        notices = container.notice_service.list_notices(
            teacher_id=request.args.get("teacherId") or None,
            student_id=student_id,
        )
        return jsonify([n.to_dict() for n in notices])

    @app.route("/api/notices", methods=["POST"], endpoint="create_notice")
    @teacher_required
    def create_notice():
        notice = container.notice_service.create(author_id=current_user_id(), data=json_body())
        return jsonify(notice.to_dict()), 201

    @app.route("/api/notices/<notice_id>", methods=["PUT"], endpoint="update_notice")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def update_notice(notice_id: str):
        notice = container.notice_service.update(
            actor_id=current_user_id(),
            actor_role=current_role(),
            notice_id=notice_id,
            data=json_body(),
        )
        return jsonify(notice.to_dict())

    @app.route("/api/notices/<notice_id>", methods=["DELETE"], endpoint="delete_notice")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def delete_notice(notice_id: str):
        container.notice_service.delete(actor_id=current_user_id(), actor_role=current_role(), notice_id=notice_id)
        return jsonify({"message": "Notice deleted"})
