"""
errors.py — Structured failures raised by the service layer.
Every error carries a machine-readable kind plus a human-readable message;
the HTTP layer maps kinds to status codes.
"""


class AppError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.message}


class Unauthenticated(AppError):
    kind = "unauthenticated"
    status_code = 401


class NotFound(AppError):
    """Missing entity, or one owned by another user. The two are indistinguishable."""
    kind = "not_found"
    status_code = 404


class PlanLimitExceeded(AppError):
    kind = "plan_limit_exceeded"
    status_code = 403

    def __init__(self, plan: str, limit, resource: str):
        super().__init__(
            f"Plan limit reached: {plan} plan allows {limit} active {resource}. "
            f"Upgrade to Pro for unlimited."
        )
        self.plan = plan
        self.limit = limit
        self.resource = resource


class ValidationError(AppError):
    kind = "validation_error"
    status_code = 422


class UpstreamFailure(AppError):
    kind = "upstream_failure"
    status_code = 503


class TemplateInstantiationError(UpstreamFailure):
    """Raised when a template expansion fails; every insert has been rolled back."""

    def __init__(self, message: str, report: dict):
        super().__init__(message)
        self.report = report

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["report"] = self.report
        return data
