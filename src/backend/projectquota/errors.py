"""Project quota webhook error hierarchy.

All core errors inherit from QuotaWebhookError. Policy violations also carry
the PolicyViolation marker: the admission router answers those with a denied
AdmissionReview. Everything else reaches the global exception handler in
main.py, which returns a structured JSON error with the HTTP status code so
the API server applies the webhook's failure policy.
"""


class QuotaWebhookError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class PolicyViolation(QuotaWebhookError):
    """A deliberate rejection of the admitted object."""

    status_code = 403
    code = "POLICY_VIOLATION"


class BadRequestError(QuotaWebhookError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(QuotaWebhookError):
    status_code = 404
    code = "NOT_FOUND"


class UpstreamError(QuotaWebhookError):
    status_code = 503
    code = "UPSTREAM_UNAVAILABLE"


class MissingOwnershipTagError(PolicyViolation):
    status_code = 403
    code = "MISSING_OWNERSHIP_TAG"


class QuotaExceededError(PolicyViolation):
    status_code = 403
    code = "QUOTA_EXCEEDED"


class InvalidQuotaError(PolicyViolation):
    status_code = 422
    code = "INVALID_QUOTA"
