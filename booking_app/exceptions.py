class RequestValidationError(ValueError):
    """Raised by a service when its request validator reports failures.

    The message is the first reported error; ``errors`` keeps all of them.
    """

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__(self.errors[0] if self.errors else "Invalid request")


class BookingError(Exception):
    """Base exception for booking failures."""

    def __init__(self, message, code="booking_error"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class PastBookingError(BookingError):
    def __init__(self, message="Unable to add a booking in the past"):
        super().__init__(message, code="past_booking")


class InvalidBookingRangeError(BookingError):
    def __init__(self, message="End time must be after start time"):
        super().__init__(message, code="invalid_range")


class SlotUnavailableError(BookingError):
    def __init__(self, message="This timeslot is not currently available"):
        super().__init__(message, code="slot_unavailable")


class NotFoundError(BookingError):
    pass


class PatientNotFoundError(NotFoundError):
    def __init__(self, message="A patient with that ID could not be found"):
        super().__init__(message, code="patient_not_found")


class DoctorNotFoundError(NotFoundError):
    def __init__(self, message="A doctor with that ID could not be found"):
        super().__init__(message, code="doctor_not_found")


class BookingNotFoundError(NotFoundError):
    def __init__(self, message="Unable to find appointment"):
        super().__init__(message, code="booking_not_found")


class NoUpcomingBookingError(NotFoundError):
    def __init__(self, message="The patient has no upcoming appointments"):
        super().__init__(message, code="no_upcoming_booking")
