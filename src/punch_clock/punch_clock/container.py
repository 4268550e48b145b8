from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .attendance.factory import PunchStrategyFactory
from .attendance.mysql_attendance_repository import MySQLPunchLogRepository
from .attendance.repository import PunchLogRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import BREAK_WARNING_HOURS, DEFAULT_HOURLY_RATE
from .database.connection import DBConfig, DatabaseConnection
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.service import PayrollReportService
from .requests.mysql_request_repository import MySQLHolidayRequestRepository
from .requests.repository import HolidayRequestRepository
from .requests.service import HolidayRequestService
from .users.mysql_employee_repository import MySQLEmployeeRepository
from .users.repository import EmployeeRepository
from .users.service import EmployeeService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    punch_logs_repo: PunchLogRepository
    holiday_requests_repo: HolidayRequestRepository

    employee_service: EmployeeService
    attendance_service: AttendanceService
    payroll_report_service: PayrollReportService
    holiday_request_service: HolidayRequestService

    conn: Optional[DatabaseConnection] = None
    # Read once per request; controllers pass it down as ``now``.
    clock: Callable[[], datetime] = field(default=now_local)


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    punch_logs_repo: PunchLogRepository,
    holiday_requests_repo: HolidayRequestRepository,
    conn: Optional[DatabaseConnection] = None,
    clock: Callable[[], datetime] = now_local,
    default_hourly_rate: float = DEFAULT_HOURLY_RATE,
    break_warning_hours: float = BREAK_WARNING_HOURS,
) -> Container:
    calculator = StandardPayrollCalculator()
    return Container(
        employees_repo=employees_repo,
        punch_logs_repo=punch_logs_repo,
        holiday_requests_repo=holiday_requests_repo,
        employee_service=EmployeeService(employees_repo, default_hourly_rate=default_hourly_rate),
        attendance_service=AttendanceService(
            punch_logs_repo,
            employees_repo,
            strategy_factory=PunchStrategyFactory(),
            calculator=calculator,
            break_warning_hours=break_warning_hours,
        ),
        payroll_report_service=PayrollReportService(punch_logs_repo, employees_repo, calculator=calculator),
        holiday_request_service=HolidayRequestService(holiday_requests_repo, employees_repo),
        conn=conn,
        clock=clock,
    )


def build_container(
    *,
    db_config: dict,
    default_hourly_rate: float = DEFAULT_HOURLY_RATE,
    break_warning_hours: float = BREAK_WARNING_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return wire_services(
        employees_repo=MySQLEmployeeRepository(conn),
        punch_logs_repo=MySQLPunchLogRepository(conn),
        holiday_requests_repo=MySQLHolidayRequestRepository(conn),
        conn=conn,
        default_hourly_rate=default_hourly_rate,
        break_warning_hours=break_warning_hours,
    )
