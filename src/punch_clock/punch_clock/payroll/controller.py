from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.http import admin_required, api_errors, arg_date, json_ok
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/reports", methods=["GET"], endpoint="admin_reports")
    @admin_required
    @api_errors
    def admin_reports():
        now = container.clock()
        start = arg_date("start", now.date() - timedelta(days=6))
        end = arg_date("end", now.date())

        employee_id = None
        raw_id = (request.args.get("employee_id") or "").strip()
        if raw_id:
            if not raw_id.isdigit():
                raise ValidationError("Invalid employee_id")
            employee_id = int(raw_id)

        data = container.payroll_report_service.build_range_report(
            start=start,
            end=end,
            now=now,
            employee_id=employee_id,
        )
        return json_ok(start=start.isoformat(), end=end.isoformat(), rows=data.rows, series=data.series)
