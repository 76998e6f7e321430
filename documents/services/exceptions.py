class ServiceError(Exception):
    """
    Business rule violation raised by the service layer.

    Views catch this and render ``{"error": {"code", "message"}}`` with
    ``http_status``. Subclasses only override the class attributes.
    """

    code = "SERVICE_ERROR"
    http_status = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_dict(self):
        payload = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class DocumentNotFound(ServiceError):
    code = "NOT_FOUND"
    http_status = 404


class InvalidTransition(ServiceError):
    """Action is not legal from the document's current status."""

    code = "INVALID_TRANSITION"
    http_status = 422


class MissingName(ServiceError):
    code = "MISSING_NAME"
    http_status = 400


class EmptySignature(ServiceError):
    code = "EMPTY_SIGNATURE"
    http_status = 400


class MissingDeliveryData(ServiceError):
    code = "MISSING_DELIVERY_DATA"
    http_status = 400


class Conflict(ServiceError):
    """The document changed underneath the writer. Refetch and retry."""

    code = "CONFLICT"
    http_status = 409
