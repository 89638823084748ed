from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import admin_required, login_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/settings", methods=["GET"], endpoint="get_settings")
    @login_required
    def get_settings():
        return jsonify(container.settings_service.get().to_dict())

    @app.route("/api/settings", methods=["POST"], endpoint="save_settings")
    @admin_required
    def save_settings():
        return jsonify(container.settings_service.save(json_body()).to_dict())
