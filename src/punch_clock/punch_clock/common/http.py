"""Helpers shared by the JSON controllers."""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ForgottenStopError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

GENERIC_ERROR = "System error, please try again."


def json_error(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def json_ok(status: int = 200, **payload):
    return jsonify({"success": True, **payload}), status


def api_errors(view):
    """Map domain errors to JSON responses; anything unexpected becomes a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ForgottenStopError as e:
            a = e.anomaly
            return json_error(
                str(e),
                409,
                forgotten_stop={
                    "work_date": a.work_date.isoformat(),
                    "kind": a.kind.value,
                    "started_at": a.started_at.isoformat(),
                },
            )
        except ValidationError as e:
            return json_error(str(e), 400)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except AuthorizationError as e:
            return json_error(str(e), 403)
        except PersistenceError as e:
            return json_error(str(e), 503)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return json_error(GENERIC_ERROR, 500)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("role") != Role.ADMIN.value:
            return json_error("Admin login required", 403)
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def arg_date(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = (request.args.get(name) or "").strip()
    if not raw:
        return default
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name} date (YYYY-MM-DD)")


def body_date(data: dict, name: str) -> Optional[date]:
    raw = str(data.get(name) or "").strip()
    if not raw:
        return None
    try:
        return parse_iso_date(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name} (YYYY-MM-DD)")


def body_datetime(data: dict, name: str) -> datetime:
    raw = str(data.get(name) or "").strip()
    if not raw:
        raise ValidationError(f"{name} is required")
    try:
        return parse_iso_datetime(raw)
    except ValueError:
        raise ValidationError(f"Invalid {name} (ISO date-time)")


def iso(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None
