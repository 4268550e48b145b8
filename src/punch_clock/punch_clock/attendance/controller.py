from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import format_hms, month_start, parse_hhmm
from ..common.http import (
    admin_required,
    api_errors,
    arg_date,
    body_datetime,
    iso,
    json_body,
    json_ok,
)
from ..core.enums import PunchAction
from ..core.exceptions import ValidationError
from ..container import Container
from .model import LiveState, RangeTotals, StoredPunchEvent, WorkSession
from .service import label_for


def state_json(state: LiveState) -> dict:
    return {
        "is_working": state.is_working,
        "is_on_break": state.is_on_break,
        "last_action": state.last_action.value if state.last_action else None,
        "last_action_time": iso(state.last_action_time),
    }


def totals_json(totals: RangeTotals) -> dict:
    return {
        "worked_hours": round(totals.worked_hours, 4),
        "worked": format_hms(totals.worked_hours),
        "break_hours": round(totals.break_hours, 4),
        "break": format_hms(totals.break_hours),
        "break_count": totals.break_count,
    }


def session_json(s: WorkSession) -> dict:
    return {
        "start": iso(s.start),
        "stop": iso(s.stop),
        "stopped_next_day": s.stopped_next_day,
        "unmatched": s.unmatched,
        "breaks": [{"start": iso(b.start), "stop": iso(b.stop), "unmatched": b.unmatched} for b in s.breaks],
    }


def entry_json(s: StoredPunchEvent) -> dict:
    return {
        "index": s.index,
        "event_id": s.event.event_id,
        "timestamp": iso(s.event.timestamp),
        "kind": s.event.kind.value,
        "label": label_for(s.event),
    }


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    # ----- punch clock -----

    @app.route("/api/punch", methods=["POST"], endpoint="api_punch")
    @api_errors
    def api_punch():
        data = json_body()
        action = str(data.get("action") or PunchAction.PUNCH.value).strip().upper()
        result = svc.punch(str(data.get("code") or ""), action, now=container.clock())
        if result.is_admin:
            return json_ok(admin=True, message=result.message)
        return json_ok(
            message=result.message,
            employee={"employee_id": result.employee.employee_id, "name": result.employee.name},
            event={"event_id": result.event.event_id, "kind": result.event.kind.value, "timestamp": iso(result.event.timestamp)},
        )

    @app.route("/api/punch/forgotten", methods=["POST"], endpoint="api_punch_forgotten")
    @api_errors
    def api_punch_forgotten():
        data = json_body()
        raw = str(data.get("stop_time") or "").strip()
        if not raw:
            raise ValidationError("stop_time is required")
        if len(raw) <= 5:
            try:
                stop_time = parse_hhmm(raw)
            except ValueError:
                raise ValidationError("Invalid stop_time (HH:MM)")
        else:
            stop_time = body_datetime(data, "stop_time")

        result = svc.resolve_forgotten_stop(str(data.get("code") or ""), stop_time, now=container.clock())
        return json_ok(message=result.message)

    @app.route("/api/state", methods=["GET"], endpoint="api_state")
    @api_errors
    def api_state():
        employee, state = svc.live_state(request.args.get("code", ""), today=container.clock().date())
        return json_ok(name=employee.name, state=state_json(state))

    # ----- admin views -----

    @app.route("/api/admin/overview", methods=["GET"], endpoint="admin_overview")
    @admin_required
    @api_errors
    def admin_overview():
        now = container.clock()
        day = arg_date("date", now.date())
        rows = svc.daily_overview(day, now=now)

        counts = {"working": 0, "on_break": 0, "completed": 0, "not_working": 0}
        for r in rows:
            counts[r.status] += 1

        return json_ok(
            date=day.isoformat(),
            counts=counts,
            rows=[
                {
                    "employee_id": r.employee_id,
                    "name": r.name,
                    "status": r.status,
                    "totals": totals_json(r.totals),
                    "state": state_json(r.state),
                    "sessions": [session_json(s) for s in r.sessions],
                    "has_entries": r.has_entries,
                    "break_warning": r.break_warning,
                }
                for r in rows
            ],
        )

    @app.route("/api/admin/working", methods=["GET"], endpoint="admin_working")
    @admin_required
    @api_errors
    def admin_working():
        working = svc.currently_working(now=container.clock())
        return json_ok(
            employees=[
                {
                    "employee_id": w.employee.employee_id,
                    "name": w.employee.name,
                    "state": state_json(w.state),
                    "elapsed": format_hms(w.elapsed_hours),
                }
                for w in working
            ]
        )

    @app.route("/api/admin/forgotten", methods=["GET"], endpoint="admin_forgotten")
    @admin_required
    @api_errors
    def admin_forgotten():
        found = svc.forgotten_stops(container.clock().date())
        return json_ok(
            employees=[
                {
                    "employee_id": emp.employee_id,
                    "name": emp.name,
                    "anomalies": [
                        {"work_date": a.work_date.isoformat(), "kind": a.kind.value, "started_at": iso(a.started_at)}
                        for a in anomalies
                    ],
                }
                for emp, anomalies in found
            ]
        )

    # ----- log editor -----

    @app.route("/api/admin/employees/<int:employee_id>/log", methods=["GET"], endpoint="admin_log")
    @admin_required
    @api_errors
    def admin_log(employee_id: int):
        entries = svc.list_log(employee_id, start=arg_date("start"), end=arg_date("end"))
        return json_ok(entries=[entry_json(e) for e in entries])

    @app.route("/api/admin/employees/<int:employee_id>/log/<int:index>", methods=["PUT"], endpoint="admin_log_replace")
    @admin_required
    @api_errors
    def admin_log_replace(employee_id: int, index: int):
        data = json_body()
        svc.replace_event_at(employee_id, index, timestamp=body_datetime(data, "timestamp"), kind=str(data.get("kind") or ""))
        return json_ok(message="Log entry updated")

    @app.route("/api/admin/employees/<int:employee_id>/log/<int:index>", methods=["DELETE"], endpoint="admin_log_delete")
    @admin_required
    @api_errors
    def admin_log_delete(employee_id: int, index: int):
        svc.delete_event_at(employee_id, index)
        return json_ok(message="Log entry deleted")

    @app.route("/api/admin/employees/<int:employee_id>/events/<event_id>", methods=["PUT"], endpoint="admin_event_replace")
    @admin_required
    @api_errors
    def admin_event_replace(employee_id: int, event_id: str):
        data = json_body()
        svc.replace_event(employee_id, event_id, timestamp=body_datetime(data, "timestamp"), kind=str(data.get("kind") or ""))
        return json_ok(message="Log entry updated")

    @app.route("/api/admin/employees/<int:employee_id>/events/<event_id>", methods=["DELETE"], endpoint="admin_event_delete")
    @admin_required
    @api_errors
    def admin_event_delete(employee_id: int, event_id: str):
        svc.delete_event(employee_id, event_id)
        return json_ok(message="Log entry deleted")

    @app.route("/api/admin/employees/<int:employee_id>/detail", methods=["GET"], endpoint="admin_employee_detail")
    @admin_required
    @api_errors
    def admin_employee_detail(employee_id: int):
        now = container.clock()
        start = arg_date("start", month_start(now.date()))
        end = arg_date("end", now.date())
        detail = svc.employee_detail(employee_id, start, end, now=now)
        return json_ok(
            employee={
                "employee_id": detail.employee.employee_id,
                "name": detail.employee.name,
                "hourly_rate": detail.employee.hourly_rate,
            },
            start=start.isoformat(),
            end=end.isoformat(),
            entries=[entry_json(e) for e in detail.entries],
            counts=detail.counts,
            totals=totals_json(detail.totals),
            earnings=detail.earnings,
            sessions=[session_json(s) for s in detail.sessions],
        )
