from typing import Optional


class EvaluatorError(Exception):
    """Base class for failures inside the evaluation engine."""


class ProviderError(EvaluatorError):
    """Raised by the model transport. `status` mirrors the HTTP status, if any."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class TransientProviderError(ProviderError):
    """Rate-limit or overload signal (429 / 503); eligible for retry."""


class ModelError(EvaluatorError):
    def __init__(self, message: str, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class MalformedResponseError(EvaluatorError):
    pass


class RubricLookupError(EvaluatorError):
    pass
