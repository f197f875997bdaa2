class PaymentCycleError(Exception):
    """Base error for the monthly rent job."""


class DuplicateObligation(PaymentCycleError):
    """A payment for this customer, booking and month already exists."""

    def __init__(self, customer_id, booking_id, month):
        self.customer_id = customer_id
        self.booking_id = booking_id
        self.month = month
        super().__init__(
            f"Payment already exists for customer {customer_id}, booking {booking_id}, month {month:%Y-%m}"
        )


class CustomerFetchError(PaymentCycleError):
    """Active customers could not be loaded; the whole run is aborted."""


class BookingFailed(PaymentCycleError):
    """Processing of one booking failed; carries what was done before the failure."""

    def __init__(self, outcome, cause: BaseException):
        self.outcome = outcome
        self.cause = cause
        super().__init__(f"Booking {outcome.booking_id} of customer {outcome.customer_id} failed: {cause}")
