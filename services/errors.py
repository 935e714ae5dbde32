"""Typed failures raised by the service layer.

Every failure carries the user-facing ``reason`` string intact; the HTTP layer
renders it verbatim with the matching status code.
"""


class ServiceError(Exception):
    code = "SERVICE_ERROR"
    status_code = 500

    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason

    def to_dict(self):
        return {"error": self.reason, "type": self.code}

    def __str__(self):
        return f"[{self.code}] {self.reason}"


class NotFound(ServiceError):
    code = "NOT_FOUND"
    status_code = 404


class Unauthorized(ServiceError):
    """Policy denial. Never downgraded to NotFound."""
    code = "UNAUTHORIZED"
    status_code = 403


class Conflict(ServiceError):
    code = "CONFLICT"
    status_code = 409


class ValidationError(ServiceError):
    code = "VALIDATION_ERROR"
    status_code = 422


class DependencyFailure(ServiceError):
    """The entity store could not be reached. Transient; callers decide whether to retry."""
    code = "DEPENDENCY_FAILURE"
    status_code = 503
