from __future__ import annotations

from flask import Flask, request, session

from ..common.http import admin_required, api_errors, arg_date, body_date, iso, json_body, json_ok
from ..core.constants import ADMIN_NAME
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import HolidayRequest


def request_json(r: HolidayRequest) -> dict:
    return {
        "request_id": r.request_id,
        "employee_id": r.employee_id,
        "employee_name": r.employee_name,
        "start_date": r.start_date.isoformat(),
        "end_date": r.end_date.isoformat(),
        "days": r.days,
        "reason": r.reason,
        "status": r.status.value,
        "submitted_at": iso(r.submitted_at),
        "reviewed_at": iso(r.reviewed_at),
        "reviewed_by": r.reviewed_by,
        "admin_notes": r.admin_notes or "",
    }


def register(app: Flask, container: Container) -> None:
    svc = container.holiday_request_service

    @app.route("/api/holidays", methods=["POST"], endpoint="holiday_submit")
    @api_errors
    def holiday_submit():
        data = json_body()
        req = svc.submit(
            secret_code=str(data.get("code") or ""),
            start_date=body_date(data, "start_date"),
            end_date=body_date(data, "end_date"),
            reason=str(data.get("reason") or ""),
            now=container.clock(),
        )
        return json_ok(201, request=request_json(req))

    @app.route("/api/holidays/status", methods=["GET"], endpoint="holiday_status")
    @api_errors
    def holiday_status():
        requests = svc.list_for_secret_code(request.args.get("code", ""))
        return json_ok(requests=[request_json(r) for r in requests])

    @app.route("/api/admin/holidays", methods=["GET"], endpoint="admin_holidays")
    @admin_required
    @api_errors
    def admin_holidays():
        status = None
        raw_status = (request.args.get("status") or "").strip().upper()
        if raw_status and raw_status != "ALL":
            try:
                status = RequestStatus(raw_status)
            except ValueError:
                raise ValidationError("Invalid status")

        raw_id = (request.args.get("employee_id") or "").strip()
        if raw_id and not raw_id.isdigit():
            raise ValidationError("Invalid employee_id")

        requests = svc.list_requests(
            status=status,
            employee_id=int(raw_id) if raw_id else None,
            start=arg_date("start"),
            end=arg_date("end"),
        )
        return json_ok(counts=svc.status_counts(), requests=[request_json(r) for r in requests])

    def _reviewer() -> str:
        return session.get("name") or ADMIN_NAME

    @app.route("/api/admin/holidays/<int:request_id>/approve", methods=["POST"], endpoint="admin_holiday_approve")
    @admin_required
    @api_errors
    def admin_holiday_approve(request_id: int):
        notes = str(json_body().get("notes") or "")
        svc.approve(request_id, reviewed_by=_reviewer(), notes=notes, now=container.clock())
        return json_ok(message="Request approved")

    @app.route("/api/admin/holidays/<int:request_id>/reject", methods=["POST"], endpoint="admin_holiday_reject")
    @admin_required
    @api_errors
    def admin_holiday_reject(request_id: int):
        notes = str(json_body().get("notes") or "")
        svc.reject(request_id, reviewed_by=_reviewer(), notes=notes, now=container.clock())
        return json_ok(message="Request rejected")
