"""
Exception hierarchy for the Recruit Tracker API.

Services raise these; ExceptionHandlerMiddleware maps them to HTTP status
codes through STATUS_CODE_MAPPING.
"""
from typing import Dict, Any
from fastapi import HTTPException


class TrackerBaseException(Exception):
    """Base exception carrying a machine-readable code and structured details"""

    error_code = "TRACKER_ERROR"

    def __init__(self, message: str, details: Dict[str, Any] = None, cause: Exception = None, **fields):
        self.message = message
        self.details = dict(details or {})
        self.details.update({k: (str(v) if k == "invalid_value" else v) for k, v in fields.items() if v is not None})
        self.cause = cause
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ValidationError(TrackerBaseException):
    """Request data breaks a rule the schema cannot express"""
    error_code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str = None, value: Any = None, **kwargs):
        super().__init__(message, field=field, invalid_value=value, **kwargs)


class BusinessLogicError(TrackerBaseException):
    """Stored data violates a business rule, e.g. a job requirement without skills"""
    error_code = "BUSINESS_LOGIC_ERROR"

    def __init__(self, message: str, rule: str = None, **kwargs):
        super().__init__(message, business_rule=rule, **kwargs)


class ConfigurationError(TrackerBaseException):
    error_code = "CONFIGURATION_ERROR"


class AuthenticationError(TrackerBaseException):
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication required", **kwargs):
        super().__init__(message, **kwargs)


class NotFoundError(TrackerBaseException):
    error_code = "NOT_FOUND"

    def __init__(self, message: str, resource: str = None, resource_id: str = None, **kwargs):
        super().__init__(message, resource=resource, resource_id=resource_id, **kwargs)


class ConflictError(TrackerBaseException):
    error_code = "CONFLICT"

    def __init__(self, message: str, resource: str = None, **kwargs):
        super().__init__(message, resource=resource, **kwargs)


class DatabaseError(TrackerBaseException):
    error_code = "DATABASE_ERROR"

    def __init__(self, message: str, operation: str = None, collection: str = None, **kwargs):
        super().__init__(message, operation=operation, collection=collection, **kwargs)


class ProcessingError(TrackerBaseException):
    error_code = "PROCESSING_ERROR"

    def __init__(self, message: str, operation: str = None, **kwargs):
        super().__init__(message, operation=operation, **kwargs)


STATUS_CODE_MAPPING = {
    ValidationError: 400,
    BusinessLogicError: 400,
    ConfigurationError: 400,
    AuthenticationError: 401,
    NotFoundError: 404,
    ConflictError: 409,
    DatabaseError: 500,
    ProcessingError: 500,
}


def map_to_http_exception(exc: TrackerBaseException) -> HTTPException:
    status_code = STATUS_CODE_MAPPING.get(type(exc), 500)
    return HTTPException(status_code=status_code, detail={"error": exc.to_dict(), "message": exc.message})


class ExceptionContext:
    """
    Wraps a block of storage or parsing work. Domain and HTTP exceptions pass
    through; anything else is logged and re-raised as ValidationError
    (KeyError/ValueError/TypeError), DatabaseError (pymongo and friends) or
    ProcessingError.
    """

    def __init__(self, operation: str, logger=None, **context):
        self.operation = operation
        self.logger = logger
        self.context = context

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or isinstance(exc_val, (TrackerBaseException, HTTPException)):
            return False

        if self.logger:
            self.logger.error(
                f"Operation failed: {self.operation} - {exc_val}",
                extra={"context": self.context, "exception_type": exc_type.__name__}
            )

        message = f"{self.operation}: {exc_val}"
        if isinstance(exc_val, (KeyError, ValueError, TypeError)):
            wrapped = ValidationError(f"Validation error in {message}", details=self.context, cause=exc_val)
        elif _looks_like_database_error(exc_type, exc_val):
            wrapped = DatabaseError(f"Database error in {message}", operation=self.operation,
                                    details=self.context, cause=exc_val)
        else:
            wrapped = ProcessingError(f"Processing error in {message}", operation=self.operation,
                                      details=self.context, cause=exc_val)
        raise wrapped from exc_val


def _looks_like_database_error(exc_type, exc_val) -> bool:
    text = str(exc_val).lower()
    return exc_type.__module__.startswith(("pymongo", "motor")) or "database" in text or "mongo" in text
