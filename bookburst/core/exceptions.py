from typing import Dict, List, Optional, Any
from fastapi import HTTPException, status


class APIException(HTTPException):
    """
    Base exception class for API errors.
    Extends HTTPException with an error code and the offending field.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: Optional[str] = None,
        field: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.field = field

    def to_response(self) -> Dict[str, Any]:
        """Convert to response dict."""
        response = {"detail": self.detail}

        if self.code:
            response["code"] = self.code

        if self.field:
            response["field"] = self.field

        return response


class BadRequestException(APIException):
    """400 Bad Request exception."""

    def __init__(
        self,
        detail: str = "Bad request",
        code: Optional[str] = "bad_request",
        field: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code=code,
            field=field,
            headers=headers,
        )


class ValidationException(BadRequestException):
    """400 Validation error carrying field-level details."""

    def __init__(
        self,
        detail: str = "Validation error",
        errors: Optional[List[Dict[str, Any]]] = None,
        field: Optional[str] = None,
        code: Optional[str] = "validation_error",
    ):
        super().__init__(detail=detail, code=code, field=field)
        if errors is None and field:
            errors = [{"field": field, "message": detail, "type": "value_error"}]
        self.errors = errors or []

    def to_response(self) -> Dict[str, Any]:
        """Convert to response dict."""
        return {"detail": self.detail, "code": self.code, "errors": self.errors}


class UnauthorizedException(APIException):
    """401 Unauthorized exception."""

    def __init__(
        self,
        detail: str = "Not authenticated",
        code: Optional[str] = "unauthorized",
        headers: Optional[Dict[str, str]] = None,
    ):
        if headers is None:
            headers = {"WWW-Authenticate": "Bearer"}

        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code=code,
            headers=headers,
        )


class ForbiddenException(APIException):
    """403 Forbidden exception."""

    def __init__(
        self,
        detail: str = "Permission denied",
        code: Optional[str] = "forbidden",
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            code=code,
            headers=headers,
        )


class NotFoundException(APIException):
    """404 Not Found exception."""

    def __init__(
        self,
        detail: str = "Resource not found",
        code: Optional[str] = "not_found",
        field: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code,
            field=field,
            headers=headers,
        )


class ConflictException(APIException):
    """Duplicate of a unique pair (already shelved, already reviewed, taken username/email).

    Reported as 400 so clients treat it like any other rejected input.
    """

    def __init__(
        self,
        detail: str = "Resource already exists",
        code: Optional[str] = "conflict",
        field: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code=code,
            field=field,
            headers=headers,
        )


class ServerException(APIException):
    """500 Internal Server Error exception."""

    def __init__(
        self,
        detail: str = "Internal server error",
        code: Optional[str] = "server_error",
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            code=code,
            headers=headers,
        )


# JWT related exceptions
class TokenException(Exception):
    """Base exception for token errors."""

    pass


class InvalidToken(TokenException):
    """Invalid token exception."""

    pass


class TokenExpired(TokenException):
    """Expired token exception."""

    pass
