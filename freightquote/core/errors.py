"""Domain errors raised by the quoting services.

Every error carries the HTTP status it maps to; the application renders
them as ``{"error": message}`` payloads.
"""


class QuoteError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidInputError(QuoteError):
    """Input outside the domain of a calculation (equipment, weight, distance, page size)."""


class MissingField(QuoteError):
    pass


class InvalidWeight(QuoteError):
    pass


class UnconfirmedLocation(QuoteError):
    """Submitted location text no longer matches the place picked for it."""


class RouteUnavailable(QuoteError):
    pass


class LedgerIndexError(QuoteError, IndexError):
    status_code = 404


class LookupFailure(QuoteError):
    status_code = 502


class PersistenceFailure(QuoteError):
    status_code = 503
