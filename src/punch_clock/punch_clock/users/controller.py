from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.http import admin_required, api_errors, json_body, json_ok
from ..core.enums import Role
from ..container import Container
from .model import Employee

logger = logging.getLogger(__name__)


def employee_json(e: Employee) -> dict:
    return {
        "employee_id": e.employee_id,
        "name": e.name,
        "secret_code": e.secret_code,
        "hourly_rate": e.hourly_rate,
        "cached_amount": e.cached_amount,
    }


def register(app: Flask, container: Container) -> None:
    svc = container.employee_service

    @app.route("/api/admin/login", methods=["POST"], endpoint="admin_login")
    @api_errors
    def admin_login():
        admin = svc.authenticate_admin(str(json_body().get("code") or ""))
        session.clear()
        session["employee_id"] = admin.employee_id
        session["name"] = admin.name
        session["role"] = Role.ADMIN.value
        logger.info("Admin logged in")
        return json_ok(name=admin.name)

    @app.route("/api/admin/logout", methods=["POST"], endpoint="admin_logout")
    def admin_logout():
        session.clear()
        return json_ok(message="Logged out")

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @admin_required
    @api_errors
    def admin_employees():
        # Loading the roster refreshes the month-to-date amounts first.
        container.payroll_report_service.refresh_cached_amounts(now=container.clock())
        employees = svc.list_employees(search=request.args.get("q", ""))
        return json_ok(employees=[employee_json(e) for e in employees])

    @app.route("/api/admin/employees", methods=["POST"], endpoint="admin_employee_create")
    @admin_required
    @api_errors
    def admin_employee_create():
        data = json_body()
        emp = svc.create_employee(
            name=str(data.get("name") or ""),
            secret_code=str(data.get("secret_code") or ""),
            hourly_rate=data.get("hourly_rate"),
        )
        return json_ok(201, employee=employee_json(emp))

    @app.route("/api/admin/employees/<int:employee_id>", methods=["PUT"], endpoint="admin_employee_update")
    @admin_required
    @api_errors
    def admin_employee_update(employee_id: int):
        data = json_body()
        emp = svc.update_employee(
            employee_id,
            name=str(data.get("name") or ""),
            secret_code=str(data.get("secret_code") or ""),
            hourly_rate=data.get("hourly_rate"),
        )
        return json_ok(employee=employee_json(emp))

    @app.route("/api/admin/employees/<int:employee_id>", methods=["DELETE"], endpoint="admin_employee_delete")
    @admin_required
    @api_errors
    def admin_employee_delete(employee_id: int):
        svc.delete_employee(employee_id)
        return json_ok(message="Employee deleted")

    @app.route("/api/admin/settings", methods=["GET"], endpoint="admin_settings")
    @admin_required
    @api_errors
    def admin_settings():
        admin = svc.get_admin()
        return json_ok(name=admin.name, secret_code=admin.secret_code)

    @app.route("/api/admin/settings", methods=["PUT"], endpoint="admin_settings_update")
    @admin_required
    @api_errors
    def admin_settings_update():
        data = json_body()
        admin = svc.update_admin_settings(
            name=str(data.get("name") or ""),
            secret_code=str(data.get("secret_code") or ""),
        )
        session["name"] = admin.name
        return json_ok(name=admin.name)
