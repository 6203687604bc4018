class ReservationError(Exception):
    """Base error type for booking and cancellation rule violations."""

    code = "reservation_error"


class InvalidSlotError(ReservationError):
    """Raised when the date is outside the current week or the slot is not offered that day."""

    code = "invalid_slot"


class DailyCapExceededError(ReservationError):
    """Raised when the member already holds the maximum number of slots for that date."""

    code = "daily_cap_exceeded"


class SlotConflictError(ReservationError):
    """Raised when another active booking holds the slot."""

    code = "slot_conflict"


class DuplicateRequestError(ReservationError):
    """Raised when a pending cancellation request already exists for the booking."""

    code = "duplicate_request"


class AlreadyProcessedError(ReservationError):
    """Raised when acting on a settled cancellation request or an already cancelled booking."""

    code = "already_processed"


class BookingNotActiveError(ReservationError):
    code = "booking_not_active"


class InconsistentStateError(ReservationError):
    """An approval could not cancel its booking. Needs operator attention."""

    code = "inconsistent"
