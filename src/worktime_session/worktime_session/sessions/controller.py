from __future__ import annotations

from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_caller, error_response, login_required
from ..core.exceptions import DomainError
from ..container import Container
from .operations import pick_params
from .serialization import session_to_dict


def result_to_dict(result) -> dict:
    body = {
        "success": True,
        "operation": result.operation,
        "session": session_to_dict(result.session) if result.session else None,
    }
    if result.resolution_path is not None:
        body["resolution_path"] = result.resolution_path.value
    if result.ledger_entry is not None:
        body["ledger_entry_id"] = result.ledger_entry.entry_id
    return body


def register(app: Flask, container: Container) -> None:
    service = container.session_service

    @app.route("/api/session", methods=["GET"], endpoint="api_session")
    @login_required
    def api_session():
        username, user_id = current_caller()
        try:
            current = service.get_current_session(username, user_id)
            totals = service.current_totals(username, user_id)
            needs_resolution = service.needs_resolution(current)
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "session": session_to_dict(current) if current else None,
                "totals": asdict(totals) if totals else None,
                "needs_resolution": needs_resolution,
            }
        )

    @app.route("/api/session/<command>", methods=["POST"], endpoint="api_session_command")
    @login_required
    def api_session_command(command: str):
        username, user_id = current_caller()
        params = pick_params(request.get_json(silent=True))
        try:
            result = service.execute_named(command, username, user_id, **params)
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_dict(result))

    @app.route("/api/session/continuation-points", methods=["GET"], endpoint="api_continuation_points")
    @login_required
    def api_continuation_points():
        username, user_id = current_caller()
        try:
            current = service.get_current_session(username, user_id)
            date_s = request.args.get("date")
            if date_s:
                session_date = parse_iso_date(date_s)
            elif current is not None and current.day_start_time is not None:
                session_date = current.work_date
            else:
                return jsonify({"success": True, "points": []})
            points = service.active_continuation_points(username, session_date)
        except ValueError:
            return jsonify({"success": False, "message": "date must be YYYY-MM-DD"}), 400
        except DomainError as e:
            return error_response(e)

        return jsonify(
            {
                "success": True,
                "session_date": session_date.strftime("%Y-%m-%d"),
                "points": [
                    {
                        "point_id": p.point_id,
                        "kind": p.kind.value,
                        "timestamp": p.timestamp.isoformat(),
                    }
                    for p in points
                ],
            }
        )
