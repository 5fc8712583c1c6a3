"""
Domain error taxonomy for the assessment core.

Services raise these; controllers translate them into HTTP responses.
"""


class CareerCoreError(Exception):
    """Base class for all assessment-core errors"""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationError(CareerCoreError):
    """Missing or invalid caller input"""


class NotFoundError(CareerCoreError):
    """Unknown or not-owned assessment, question or chat session"""


class ConflictError(CareerCoreError):
    """A non-terminal record already exists where only one is allowed"""


class InvalidStateError(CareerCoreError):
    """Operation not allowed in the assessment's current lifecycle state"""


class ExternalServiceError(CareerCoreError):
    """Generative AI, report rendering or email delivery failed"""


class RateLimitedError(ExternalServiceError):
    """The external service signalled a rate limit; safe to retry after backoff"""


class AnalysisParseError(ExternalServiceError):
    """AI output could not be parsed into the career-analysis shape"""


_STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidStateError, 409),
    (ExternalServiceError, 502),
)


def status_code_for(error: CareerCoreError) -> int:
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 500
