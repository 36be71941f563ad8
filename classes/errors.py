class AnalyticsError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"message": self.message}


class PreconditionFailed(AnalyticsError):
    status_code = 404


class ScopeNotFound(PreconditionFailed):
    """The caller has no organisational anchor (department, school...)."""


class NotFound(AnalyticsError):
    status_code = 404


class Forbidden(AnalyticsError):
    status_code = 403


class ValidationFailed(AnalyticsError):
    status_code = 400


class Conflict(AnalyticsError):
    status_code = 409


class ComputeFailure(AnalyticsError):
    status_code = 500


class ComputeTimeout(ComputeFailure):
    status_code = 504
