from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request

from ..attendance.controller import current_session, login_required
from ..common.datetime_utils import now_local, parse_iso_date
from ..core.exceptions import ValidationError
from ..container import Container


def _parse_ids(raw: Optional[str]):
    if not raw:
        return None
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise ValidationError("employee_ids must be a comma separated list of integers")


def register(app: Flask, container: Container) -> None:
    svc = container.hours_service

    @app.route("/api/hours/summary", methods=["GET"], endpoint="hours_summary")
    @login_required
    def hours_summary():
        ctx = current_session()
        raw_date = request.args.get("date")
        reference = parse_iso_date(raw_date) if raw_date else now_local().date()

        ids = svc.scope(ctx, _parse_ids(request.args.get("employee_ids")))
        report = svc.build_report(ctx, reference_date=reference, employee_ids=ids)
        return jsonify({"success": True, "data": report.to_dict(svc.display_names(ids))})
