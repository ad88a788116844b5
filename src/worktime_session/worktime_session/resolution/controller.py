from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import format_iso_datetime
from ..common.http import current_caller, error_response, login_required
from ..core.exceptions import DomainError
from ..container import Container
from ..sessions.controller import result_to_dict
from ..sessions.operations import Skip, operation_from_name, pick_params
from ..sessions.serialization import session_to_dict


def context_to_dict(ctx) -> dict:
    return {
        "work_date": ctx.work_date.strftime("%Y-%m-%d"),
        "schedule_hours": ctx.schedule_hours,
        "session": session_to_dict(ctx.session),
        "has_midnight_end": ctx.has_midnight_end,
        "default_end_time": format_iso_datetime(ctx.default_end_time),
        "recommended_overtime_minutes": ctx.recommended_overtime_minutes,
        "continuation_points": [
            {"point_id": p.point_id, "kind": p.kind.value, "timestamp": p.timestamp.isoformat()}
            for p in ctx.continuation_points
        ],
        "overtime_options": [
            {
                "overtime_minutes": o.overtime_minutes,
                "label": o.label,
                "total_minutes": o.total_minutes,
                "formatted_duration": o.formatted_duration,
                "needs_lunch_break": o.needs_lunch_break,
                "recommended": o.recommended,
            }
            for o in ctx.overtime_options
        ],
    }


def register(app: Flask, container: Container) -> None:
    sessions = container.session_service
    resolution = container.resolution_service

    @app.route("/api/session/resolution", methods=["GET"], endpoint="api_session_resolution")
    @login_required
    def api_session_resolution():
        username, user_id = current_caller()
        try:
            current = sessions.get_current_session(username, user_id)
            ctx = resolution.build_context(current, container.clock())
        except DomainError as e:
            return error_response(e)

        if ctx is None:
            return jsonify({"success": True, "needs_resolution": False})
        return jsonify({"success": True, "needs_resolution": True, "context": context_to_dict(ctx)})

    @app.route("/api/session/resolve", methods=["POST"], endpoint="api_session_resolve")
    @login_required
    def api_session_resolve():
        username, user_id = current_caller()
        params = pick_params(request.get_json(silent=True))
        try:
            operation = operation_from_name("resolve", **params)
            result = sessions.execute(operation, username, user_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_dict(result))

    @app.route("/api/session/resolve/skip", methods=["POST"], endpoint="api_session_resolve_skip")
    @login_required
    def api_session_resolve_skip():
        username, user_id = current_caller()
        try:
            result = sessions.execute(Skip(), username, user_id)
        except DomainError as e:
            return error_response(e)
        return jsonify(result_to_dict(result))
