class GatewayError(Exception):
    """Base exception for request-level errors; each subclass maps to an HTTP status."""

    status_code = 500


class ValidationError(GatewayError):
    """The request is missing a required field or carries malformed input."""

    status_code = 400


class PayloadTooLargeError(GatewayError):
    """The uploaded file exceeds the configured size limit."""

    status_code = 413


class NotFoundError(GatewayError):
    """The requested document, blob or audit record does not exist."""

    status_code = 404
