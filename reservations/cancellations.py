"""
Cancellation workflow.

A request is created either already approved (at least the configured lead
time before the slot starts) or pending. Pending requests are settled once by
an administrator; approved and rejected are terminal. Every approval cancels
the booking in the same database transaction as the status change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from accounts.services import member_identity

from . import ledger
from .errors import (
    AlreadyProcessedError,
    BookingNotActiveError,
    DuplicateRequestError,
    InconsistentStateError,
)
from .models import Booking, CancellationRequest
from .schedule import is_auto_approval_eligible


logger = logging.getLogger(__name__)

APPROVE = "approve"
REJECT = "reject"
ACTIONS = (APPROVE, REJECT)


@dataclass(frozen=True)
class CancellationOutcome:
    request: CancellationRequest
    auto_approved: bool


def _cancel_booking_for(request: CancellationRequest, by) -> None:
    if request.booking_id is None:
        logger.error(
            "Cancellation request %s approved but its booking no longer exists",
            request.pk,
        )
        raise InconsistentStateError("The booking for this request no longer exists.")
    try:
        ledger.soft_cancel(request.booking_id, by)
    except (Booking.DoesNotExist, BookingNotActiveError) as exc:
        logger.error(
            "Cancellation request %s approved but booking %s could not be cancelled: %s",
            request.pk,
            request.booking_id,
            exc,
        )
        raise InconsistentStateError("The booking could not be cancelled.") from exc


def request_cancellation(
    *,
    user,
    booking_id: int,
    reason: str,
    now: datetime | None = None,
) -> CancellationOutcome:
    """
    Ask to cancel one of the member's own bookings.

    Raises Booking.DoesNotExist, PermissionDenied (not the owner),
    AlreadyProcessedError (booking already cancelled) or DuplicateRequestError.
    """
    now = now or timezone.now()
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError({"reason": "A reason is required."})

    identity = member_identity(user)
    try:
        with transaction.atomic():
            booking = Booking.objects.select_for_update().get(pk=booking_id)

            if booking.user_id != user.pk:
                raise PermissionDenied("You can only request cancellation for your own bookings.")
            if booking.cancelled:
                raise AlreadyProcessedError("This booking is already cancelled.")
            if booking.cancellation_requests.filter(status=CancellationRequest.Status.PENDING).exists():
                raise DuplicateRequestError("You already have a pending cancellation request for this booking.")

            eligible = is_auto_approval_eligible(booking.date, booking.slot, now)
            request = CancellationRequest.objects.create(
                booking=booking,
                user=user,
                user_email=identity.email,
                user_name=identity.display_name,
                date=booking.date,
                slot=booking.slot,
                band_name=booking.band_name,
                reason=reason,
                status=CancellationRequest.Status.APPROVED if eligible else CancellationRequest.Status.PENDING,
                auto_approved=eligible,
            )
            if eligible:
                _cancel_booking_for(request, user)
    except IntegrityError as exc:
        raise DuplicateRequestError("You already have a pending cancellation request for this booking.") from exc

    if eligible:
        logger.info("Cancellation request %s auto-approved; booking %s cancelled", request.pk, booking.pk)
    else:
        logger.info("Cancellation request %s for booking %s is pending review", request.pk, booking.pk)
    return CancellationOutcome(request=request, auto_approved=eligible)


def resolve_cancellation(
    *,
    admin,
    is_admin: bool,
    request_id: int,
    action: str,
    note: str = "",
) -> CancellationRequest:
    """
    Approve or reject a pending request. Approving cancels the booking.

    Raises PermissionDenied, CancellationRequest.DoesNotExist or
    AlreadyProcessedError (request no longer pending).
    """
    if not is_admin:
        raise PermissionDenied("Admin access required.")
    if action not in ACTIONS:
        raise ValidationError({"action": "Action must be 'approve' or 'reject'."})

    with transaction.atomic():
        request = CancellationRequest.objects.select_for_update().get(pk=request_id)
        if not request.is_pending:
            raise AlreadyProcessedError("Request has already been processed.")

        request.status = (
            CancellationRequest.Status.APPROVED if action == APPROVE else CancellationRequest.Status.REJECTED
        )
        request.admin_response = (note or "").strip()
        request.admin_response_at = timezone.now()
        request.admin = admin
        request.admin_email = getattr(admin, "email", "") or ""
        request.save(
            update_fields=["status", "admin_response", "admin_response_at", "admin", "admin_email"]
        )

        if action == APPROVE:
            _cancel_booking_for(request, admin)

    logger.info("Cancellation request %s %s by %s", request.pk, request.status, request.admin_email)
    return request


def list_cancellation_requests() -> QuerySet[CancellationRequest]:
    return CancellationRequest.objects.select_related("booking").order_by("-created_at", "-id")
