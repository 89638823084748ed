from __future__ import annotations

from flask import Flask, Response, current_app, jsonify, request, session

from ..attendance.qr import make_qr_png
from ..common.auth import admin_required, current_role, current_user_id, login_required
from ..common.http import json_body
from ..container import Container
from .model import to_public_dict


def register(app: Flask, container: Container) -> None:
    @app.route("/api/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("email"), data.get("password"), data.get("role"))

        session.clear()
        session.permanent = True
        session["user_id"] = user.id
        session["role"] = user.role.value
        session["name"] = user.name
        current_app.logger.info("login: %s (%s)", user.id, user.role.value)
        return jsonify(to_public_dict(user))

    @app.route("/api/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/register", methods=["POST"], endpoint="register_teacher")
    def register_teacher():
        data = json_body()
        user = container.user_service.register_teacher(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
        )
        return jsonify(to_public_dict(user)), 201

    @app.route("/api/forgot-password", methods=["POST"], endpoint="forgot_password")
    def forgot_password():
        container.auth_service.request_password_reset(json_body().get("email"))
        return jsonify({"message": "Password reset instructions have been sent to your email."})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @login_required
    def list_users():
        teacher_id = request.args.get("teacherId")
        if teacher_id:
            users = container.user_service.list_students_of(teacher_id)
        else:
            users = container.user_service.list_users(role=request.args.get("role"))
        return jsonify([to_public_dict(u) for u in users])

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @admin_required
    def create_user():
        user = container.user_service.create_account(json_body())
        return jsonify(to_public_dict(user)), 201

    @app.route("/api/users/bulk-assign", methods=["POST"], endpoint="bulk_assign")
    @admin_required
    def bulk_assign():
        data = json_body()
        students = container.user_service.bulk_assign(data.get("studentIds"), data.get("teacherIds"))
        return jsonify([to_public_dict(u) for u in students])

    @app.route("/api/users/<user_id>", methods=["GET"], endpoint="get_user")
    @login_required
    def get_user(user_id: str):
        return jsonify(to_public_dict(container.user_service.get_user(user_id)))

    @app.route("/api/users/<user_id>", methods=["PUT"], endpoint="update_user")
    @login_required
    def update_user(user_id: str):
        user = container.user_service.update_account(
            actor_id=current_user_id(),
            actor_role=current_role(),
            user_id=user_id,
            changes=json_body(),
        )
        if user.id == current_user_id():
            session["name"] = user.name
        return jsonify(to_public_dict(user))

    @app.route("/api/users/<user_id>", methods=["DELETE"], endpoint="delete_user")
    @admin_required
    def delete_user(user_id: str):
        container.user_service.delete_account(user_id)
        return jsonify({"message": "User deleted successfully"})

    @app.route("/api/users/<user_id>/qr", methods=["GET"], endpoint="user_qr_image")
    @login_required
    def user_qr_image(user_id: str):
        """PNG QR code carrying the user id; teachers scan it to mark attendance."""
        user = container.user_service.get_user(user_id)
        return Response(make_qr_png(user.id), mimetype="image/png")
