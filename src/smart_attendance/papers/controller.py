from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_role, current_user_id, login_required, roles_required, teacher_required
from ..common.http import json_body
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/papers", methods=["GET"], endpoint="list_papers")
    @login_required
    def list_papers():
        student_id = request.args.get("studentId") or None
        if current_role() == Role.STUDENT:
            student_id = current_user_id()
        papers = container.paper_service.list_papers(
            teacher_id=request.args.get("teacherId") or None,
            student_id=student_id,
        )
        return jsonify([p.to_dict() for p in papers])

    @app.route("/api/papers", methods=["POST"], endpoint="upload_paper")
    @teacher_required
    def upload_paper():
        paper = container.paper_service.upload(author_id=current_user_id(), data=json_body())
        return jsonify(paper.to_dict()), 201

    @app.route("/api/papers/<paper_id>", methods=["DELETE"], endpoint="delete_paper")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def delete_paper(paper_id: str):
        container.paper_service.delete(actor_id=current_user_id(), actor_role=current_role(), paper_id=paper_id)
        return jsonify({"message": "Paper deleted"})
