"""Problem Details (RFC 9457) implementation for the docpager API."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_TYPE_BASE = "https://docpager.dev/problems"


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Extension members (cursor, page, per_page, ...)
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model."""
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance,
            **self.extensions
        )

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(exclude_none=True),
            headers={"Content-Type": "application/problem+json"}
        )


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    def __init__(self, detail: str, type_uri: str = "about:blank", **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            type_uri=type_uri,
            **extensions
        )


class UnprocessableEntityError(ProblemDetailException):
    """422 Unprocessable Entity error."""

    def __init__(self, detail: str, type_uri: str = "about:blank", **extensions: Any):
        super().__init__(
            status=422,
            title="Unprocessable Entity",
            detail=detail,
            type_uri=type_uri,
            **extensions
        )


class ServiceUnavailableError(ProblemDetailException):
    """503 Service Unavailable error."""

    def __init__(self, detail: str = "Service temporarily unavailable", **extensions: Any):
        super().__init__(
            status=503,
            title="Service Unavailable",
            detail=detail,
            **extensions
        )


class InvalidCursorError(BadRequestError):
    """Raised when a pagination cursor does not decode into a document id.

    The offending cursor is carried as the ``cursor`` extension member so
    clients can tell which value was rejected.
    """

    def __init__(self, cursor: Any, reason: str = "not a document identifier"):
        self.cursor = cursor
        super().__init__(
            f"Invalid cursor {cursor!r}: {reason}",
            type_uri=f"{PROBLEM_TYPE_BASE}/invalid-cursor",
            cursor=str(cursor)
        )


class InvalidFilterError(BadRequestError):
    """Raised when a document filter uses an unsupported shape or operator."""

    def __init__(self, detail: str, field: Optional[str] = None):
        self.field = field
        super().__init__(
            detail,
            type_uri=f"{PROBLEM_TYPE_BASE}/invalid-filter",
            field=field
        )


class InvalidPaginationParamsError(UnprocessableEntityError):
    """Raised for non-positive page numbers or page sizes."""

    def __init__(self, detail: str, **params: Any):
        self.params = params
        super().__init__(
            detail,
            type_uri=f"{PROBLEM_TYPE_BASE}/invalid-pagination-params",
            **params
        )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response."""
    if instance is None and request:
        instance = str(request.url.path)

    problem = ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance,
        **extensions
    )

    return JSONResponse(
        status_code=status,
        content=problem.model_dump(exclude_none=True),
        headers={"Content-Type": "application/problem+json"}
    )
