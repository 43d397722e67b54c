from __future__ import annotations


class ListingLookupError(Exception):
    """Base error for the listing lookup endpoint.

    ``public_message`` is what the caller sees; the exception's own
    message may carry details that stay in the logs.
    """

    status_code = 500
    public_message = "Failed to fetch PG listing. Please try again later."


class StoreConnectionError(ListingLookupError):
    status_code = 500
    public_message = "Database connection failed. Please try again later."


class InvalidListingId(ListingLookupError):
    status_code = 400
    public_message = "Invalid PG ID format"


class ListingNotFound(ListingLookupError):
    status_code = 404
    public_message = "PG listing not found"


class UnexpectedLookupError(ListingLookupError):
    status_code = 500
    public_message = "Failed to fetch PG listing. Please try again later."


class FetchFailure(Exception):
    """Raised by a listing source when the detail page cannot get its record.

    Non-2xx statuses, transport errors and undecodable bodies all collapse
    into this one error; ``status_code`` is kept only for logging.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
