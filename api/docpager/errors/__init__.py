"""Error handling module for the docpager API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    UnprocessableEntityError,
    ServiceUnavailableError,
    InvalidCursorError,
    InvalidFilterError,
    InvalidPaginationParamsError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "UnprocessableEntityError",
    "ServiceUnavailableError",
    "InvalidCursorError",
    "InvalidFilterError",
    "InvalidPaginationParamsError",
    "create_problem_response",
    "register_exception_handlers"
]
