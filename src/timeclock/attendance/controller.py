from __future__ import annotations

from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..core.session import SessionContext
from ..container import Container


def current_session() -> SessionContext:
    """Build the engine's session context from the identity stored in the Flask session."""
    try:
        role = Role(session.get("role"))
    except ValueError:
        raise ValidationError("Unknown role in session")
    return SessionContext(actor_id=int(session["employee_id"]), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "employee_id" not in session:
            return jsonify({"success": False, "error": "unauthenticated", "message": "Please sign in"}), 401
        return view(*args, **kwargs)

    return wrapper


def _int_arg(value, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    def _target_employee(ctx: SessionContext, data: dict) -> int:
        raw = data.get("employee_id")
        return ctx.actor_id if raw in (None, "") else _int_arg(raw, "employee_id")

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    def clock_in():
        data = request.get_json(silent=True) or {}
        ctx = current_session()
        record = svc.clock_in(
            ctx,
            _target_employee(ctx, data),
            timestamp=data.get("timestamp"),
            late_justification=data.get("late_justification"),
        )
        return jsonify({"success": True, "message": "Clock-in recorded", "data": record.to_dict()}), 201

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    def clock_out():
        data = request.get_json(silent=True) or {}
        ctx = current_session()
        record = svc.clock_out(
            ctx,
            _target_employee(ctx, data),
            timestamp=data.get("timestamp"),
            incident_reason=data.get("incident_reason"),
            early_exit_justification=data.get("early_exit_justification"),
        )
        message = "Clock-out recorded with incident" if record.has_incident else "Clock-out recorded"
        return jsonify({"success": True, "message": message, "data": record.to_dict()}), 200

    def _employee_arg(ctx: SessionContext) -> int:
        raw = request.args.get("employee_id")
        return ctx.actor_id if raw in (None, "") else _int_arg(raw, "employee_id")

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @login_required
    def attendance_status():
        ctx = current_session()
        raw_date = request.args.get("date")
        on = parse_iso_date(raw_date) if raw_date else None
        return jsonify({"success": True, "data": svc.today_status(ctx, _employee_arg(ctx), on=on).to_dict()})

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        ctx = current_session()
        limit = _int_arg(request.args.get("limit", 30), "limit")
        rows = [r.to_dict() for r in svc.history(ctx, _employee_arg(ctx), limit=limit)]
        return jsonify({"success": True, "count": len(rows), "data": rows})

    @app.route("/api/attendance/records", methods=["GET"], endpoint="attendance_records")
    @login_required
    def attendance_records():
        ctx = current_session()
        start = parse_iso_date(request.args.get("start", ""))
        end = parse_iso_date(request.args.get("end", ""))
        raw_employee = request.args.get("employee_id")
        employee_id = _int_arg(raw_employee, "employee_id") if raw_employee else None
        rows = [r.to_dict() for r in svc.list_records(ctx, start=start, end=end, employee_id=employee_id)]
        return jsonify({"success": True, "count": len(rows), "data": rows})

    @app.route("/api/attendance/records/<int:record_id>", methods=["GET"], endpoint="attendance_record")
    @login_required
    def attendance_record(record_id: int):
        record = svc.get_record(current_session(), record_id)
        return jsonify({"success": True, "data": record.to_dict()})

    @app.route("/api/attendance/records/<int:record_id>", methods=["PUT"], endpoint="attendance_correct")
    @login_required
    def attendance_correct(record_id: int):
        data = request.get_json(silent=True) or {}
        record = svc.correct_record(
            current_session(),
            record_id,
            clock_in=data.get("clock_in"),
            clock_out=data.get("clock_out"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "message": "Record corrected", "data": record.to_dict()})

    @app.route("/api/attendance/records/<int:record_id>/audit", methods=["GET"], endpoint="attendance_audit")
    @login_required
    def attendance_audit(record_id: int):
        rows = [e.to_dict() for e in svc.audit_trail(current_session(), record_id)]
        return jsonify({"success": True, "count": len(rows), "data": rows})

    @app.route("/api/attendance/records/<int:record_id>", methods=["DELETE"], endpoint="attendance_delete")
    @login_required
    def attendance_delete(record_id: int):
        data = request.get_json(silent=True) or {}
        record = svc.delete_record(current_session(), record_id, reason=data.get("reason"))
        return jsonify({"success": True, "message": "Record deleted", "data": record.to_dict()})

    @app.route("/api/attendance/records/<int:record_id>/restore", methods=["POST"], endpoint="attendance_restore")
    @login_required
    def attendance_restore(record_id: int):
        record = svc.restore_record(current_session(), record_id)
        return jsonify({"success": True, "message": "Record restored", "data": record.to_dict()})

    @app.route("/api/attendance/records/<int:record_id>/permanent", methods=["DELETE"], endpoint="attendance_purge")
    @login_required
    def attendance_purge(record_id: int):
        svc.purge_record(current_session(), record_id)
        return jsonify({"success": True, "message": "Record permanently deleted", "data": {"id": record_id}})

    @app.route("/api/attendance/deleted", methods=["GET"], endpoint="attendance_deleted")
    @login_required
    def attendance_deleted():
        rows = [r.to_dict() for r in svc.list_deleted(current_session())]
        return jsonify({"success": True, "count": len(rows), "data": rows})
