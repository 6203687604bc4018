from __future__ import annotations

import json
from datetime import date as date_type

from django.core.exceptions import PermissionDenied
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_GET
from django.views.decorators.http import require_http_methods
from django.views.decorators.http import require_POST

from accounts.services import is_room_admin

from .cancellations import list_cancellation_requests, request_cancellation, resolve_cancellation
from .errors import (
    AlreadyProcessedError,
    DailyCapExceededError,
    DuplicateRequestError,
    InconsistentStateError,
    InvalidSlotError,
    ReservationError,
    SlotConflictError,
)
from .ledger import find_active_by_user
from .models import Booking, CancellationRequest
from .schedule import day_type, slot_label, slots_for
from .services import BookingInput, reserve, reset_week, week_view


ERROR_STATUS = {
    InvalidSlotError: 400,
    DailyCapExceededError: 400,
    SlotConflictError: 409,
    DuplicateRequestError: 409,
    AlreadyProcessedError: 409,
    InconsistentStateError: 500,
}


def _error(message: str, code: str, status: int, **extra) -> JsonResponse:
    return JsonResponse({"error": message, "code": code, **extra}, status=status)


def _unauthenticated() -> JsonResponse:
    return _error("Authentication required.", "unauthenticated", 401)


def _reservation_error(exc: ReservationError) -> JsonResponse:
    return _error(str(exc), exc.code, ERROR_STATUS.get(type(exc), 400))


def _validation_error(exc: ValidationError) -> JsonResponse:
    details = exc.message_dict if hasattr(exc, "error_dict") else {"__all__": exc.messages}
    return _error("Validation error.", "validation_error", 400, details=details)


def _read_json(request) -> dict | None:
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None


def _booking_payload(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "user_id": booking.user_id,
        "user_email": booking.user_email,
        "user_name": booking.user_name,
        "date": booking.date.isoformat(),
        "slot": booking.slot,
        "slot_label": booking.slot_label,
        "band_name": booking.band_name,
        "created_at": booking.created_at.isoformat(),
        "cancelled": booking.cancelled,
        "cancelled_at": booking.cancelled_at.isoformat() if booking.cancelled_at else None,
        "cancelled_by": booking.cancelled_by_id,
        "cancelled_by_email": booking.cancelled_by_email or None,
    }


def _request_payload(req: CancellationRequest) -> dict:
    return {
        "id": req.id,
        "booking_id": req.booking_id,
        "user_id": req.user_id,
        "user_email": req.user_email,
        "user_name": req.user_name,
        "date": req.date.isoformat(),
        "slot": req.slot,
        "slot_label": req.slot_label,
        "band_name": req.band_name,
        "reason": req.reason,
        "status": req.status,
        "auto_approved": req.auto_approved,
        "created_at": req.created_at.isoformat(),
        "admin_response": req.admin_response or None,
        "admin_response_at": req.admin_response_at.isoformat() if req.admin_response_at else None,
        "admin_id": req.admin_id,
        "admin_email": req.admin_email or None,
    }


@require_GET
def week_api(request):
    """
    GET /api/week/

    The current week: dates with their slot catalog, every booking dated in
    the week (cancelled ones included), a date -> slot -> booking map of the
    active ones, and the week's cancellation requests.
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    view = week_view()
    slot_map = view.active_by_slot
    return JsonResponse(
        {
            "dates": [d.isoformat() for d in view.dates],
            "days": [
                {
                    "date": d.isoformat(),
                    "day_type": day_type(d).value,
                    "slots": [{"value": s, "label": slot_label(d, s)} for s in slots_for(d)],
                }
                for d in view.dates
            ],
            "bookings": [_booking_payload(b) for b in view.bookings],
            "date_slot_map": {
                d.isoformat(): {str(slot): _booking_payload(b) for slot, b in slots.items()}
                for d, slots in slot_map.items()
            },
            "cancellation_requests": [_request_payload(r) for r in view.cancellation_requests],
        }
    )


@require_POST
def create_booking_api(request):
    """
    POST /api/bookings/
    Payload (JSON):
      - date: YYYY-MM-DD
      - slot: int
      - band_name: str
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    payload = _read_json(request)
    if payload is None:
        return _error("Invalid JSON payload.", "validation_error", 400)

    date_str = payload.get("date")
    slot = payload.get("slot")
    band_name = payload.get("band_name")

    if not isinstance(date_str, str) or not date_str.strip():
        return _error("date is required.", "validation_error", 400)
    if not isinstance(slot, int) or isinstance(slot, bool):
        return _error("slot must be an integer.", "validation_error", 400)
    if not isinstance(band_name, str):
        return _error("band_name must be a string.", "validation_error", 400)

    try:
        target_date = date_type.fromisoformat(date_str.strip())
    except ValueError:
        return _error("Invalid date. Expected YYYY-MM-DD.", "validation_error", 400)

    try:
        booking = reserve(
            user=request.user,
            data=BookingInput(date=target_date, slot=slot, band_name=band_name),
        )
    except ValidationError as exc:
        return _validation_error(exc)
    except ReservationError as exc:
        return _reservation_error(exc)

    return JsonResponse(
        {
            "success": True,
            "booking_id": booking.id,
            "message": "Booking created successfully.",
        },
        status=201,
    )


@require_GET
def my_bookings_api(request):
    """GET /api/bookings/mine/"""
    if not request.user.is_authenticated:
        return _unauthenticated()

    return JsonResponse({"bookings": [_booking_payload(b) for b in find_active_by_user(request.user)]})


@require_http_methods(["GET", "POST"])
def cancellation_requests_api(request):
    """
    GET  /api/cancellation-requests/  (admin) all requests, newest first.
    POST /api/cancellation-requests/  {"booking_id": int, "reason": str}
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    if request.method == "GET":
        if not is_room_admin(request.user):
            return _error("Admin access required.", "forbidden", 403)
        return JsonResponse({"requests": [_request_payload(r) for r in list_cancellation_requests()]})

    payload = _read_json(request)
    if payload is None:
        return _error("Invalid JSON payload.", "validation_error", 400)

    booking_id = payload.get("booking_id")
    reason = payload.get("reason")
    if not isinstance(booking_id, int) or isinstance(booking_id, bool):
        return _error("booking_id must be an integer.", "validation_error", 400)
    if not isinstance(reason, str) or not reason.strip():
        return _error("reason is required.", "validation_error", 400)

    try:
        outcome = request_cancellation(user=request.user, booking_id=booking_id, reason=reason)
    except Booking.DoesNotExist:
        return _error("Booking not found.", "not_found", 404)
    except PermissionDenied as exc:
        return _error(str(exc) or "Forbidden.", "forbidden", 403)
    except ValidationError as exc:
        return _validation_error(exc)
    except ReservationError as exc:
        return _reservation_error(exc)

    return JsonResponse(
        {
            "success": True,
            "request_id": outcome.request.id,
            "auto_approved": outcome.auto_approved,
            "status": outcome.request.status,
        },
        status=201,
    )


@require_POST
def resolve_cancellation_api(request, request_id: int):
    """
    POST /api/cancellation-requests/<id>/resolve/
    Payload (JSON):
      - action: "approve" | "reject"
      - admin_response: str (optional)
    """
    if not request.user.is_authenticated:
        return _unauthenticated()

    payload = _read_json(request)
    if payload is None:
        return _error("Invalid JSON payload.", "validation_error", 400)

    action = payload.get("action")
    note = payload.get("admin_response") or ""
    if not isinstance(note, str):
        return _error("admin_response must be a string.", "validation_error", 400)

    try:
        resolved = resolve_cancellation(
            admin=request.user,
            is_admin=is_room_admin(request.user),
            request_id=request_id,
            action=action,
            note=note,
        )
    except PermissionDenied as exc:
        return _error(str(exc) or "Forbidden.", "forbidden", 403)
    except CancellationRequest.DoesNotExist:
        return _error("Cancellation request not found.", "not_found", 404)
    except ValidationError as exc:
        return _validation_error(exc)
    except ReservationError as exc:
        return _reservation_error(exc)

    return JsonResponse({"success": True, "request_id": resolved.id, "status": resolved.status})


@require_POST
def reset_week_api(request):
    """POST /api/week/reset/ (admin) removes every booking in the current week."""
    if not request.user.is_authenticated:
        return _unauthenticated()

    try:
        deleted = reset_week(is_admin=is_room_admin(request.user))
    except PermissionDenied as exc:
        return _error(str(exc) or "Forbidden.", "forbidden", 403)

    return JsonResponse({"success": True, "deleted_count": deleted})
