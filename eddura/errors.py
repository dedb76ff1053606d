class ServiceError(Exception):
    """Error raised by the service layer and rendered as JSON by the app."""

    status = 400

    def __init__(self, message, status=None, **payload):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.payload = payload

    def to_dict(self):
        body = {"error": self.message}
        body.update(self.payload)
        return body


class NotFound(ServiceError):
    status = 404


class Forbidden(ServiceError):
    status = 403


class Conflict(ServiceError):
    status = 409


class ValidationFailed(ServiceError):
    def __init__(self, details, message="validation_failed"):
        super().__init__(message, details=details)
        self.details = details


class PaywallRestricted(ServiceError):
    status = 403

    def __init__(self, message, **payload):
        super().__init__(message, code="PAYWALL_RESTRICTED", **payload)


class AIUnavailable(ServiceError):
    status = 503
