"""Errors raised by the stores, the forwarder and the access gate.

Each carries the HTTP status it maps to; the app renders them as
``{"error": message}``.
"""


class OrderApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderApiError):
    """Malformed input."""
    status_code = 400


class Unauthorized(OrderApiError):
    status_code = 401


class NotFound(OrderApiError):
    status_code = 404


class UpstreamError(OrderApiError):
    """The messaging provider call failed."""
    status_code = 500


class StorageError(OrderApiError):
    """Writing to local storage failed."""
    status_code = 500
