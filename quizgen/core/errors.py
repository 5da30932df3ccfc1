"""
Error taxonomy of the generation engine and its HTTP mapping.

Services raise these; the FastAPI app turns them into the common
``{"error": {...}}`` envelope. Storage failures are not wrapped.
"""
from fastapi import status


class QuizGenError(Exception):
    """Base class for errors raised by quizgen services."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_type: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(QuizGenError):
    """Missing or malformed client input."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_type = "invalid_request"


class InsufficientStockError(InvalidRequestError):
    """Fewer questions available than requested."""

    error_type = "insufficient_stock"

    def __init__(self, have: int, need: int):
        super().__init__(f"Not enough questions in these categories (have {have}, need {need})")
        self.have = have
        self.need = need


class ForbiddenError(QuizGenError):
    """Caller may not use a record owned by another user."""

    status_code = status.HTTP_403_FORBIDDEN
    error_type = "forbidden"


class NotFoundError(QuizGenError):
    status_code = status.HTTP_404_NOT_FOUND
    error_type = "not_found"


class ConflictError(QuizGenError):
    status_code = status.HTTP_409_CONFLICT
    error_type = "conflict"


class ShortSampleError(ConflictError):
    """Sampler returned fewer questions than requested under the strict policy."""

    error_type = "short_sample"

    def __init__(self, got: int, need: int):
        super().__init__(f"Question supply changed during sampling (got {got}, need {need})")
        self.got = got
        self.need = need
