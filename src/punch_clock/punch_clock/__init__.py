"""Punch Clock package.

Feature modules (users, attendance, payroll, requests) with a thin Flask
controller layer over service and repository layers. The attendance
reducer (``attendance.reducer``) is pure and holds no I/O.
"""
