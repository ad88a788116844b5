from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_caller, error_response, login_required
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/worktime/history", methods=["GET"], endpoint="api_worktime_history")
    @login_required
    def api_worktime_history():
        _, user_id = current_caller()
        try:
            days = int(request.args.get("days", 31))
        except ValueError:
            return jsonify({"success": False, "message": "days must be an integer"}), 400

        try:
            rows = container.ledger_service.history_ui(user_id, today=container.clock().date(), days=days)
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "rows": rows})
