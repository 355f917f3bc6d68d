"""Shared exceptions module.

Domain exceptions inherit from the base classes defined here so the API layer
can map whole families of errors to HTTP status codes without registering
each one.
"""

from typing import Optional

from pydantic import ValidationError


class PageMeterException(Exception):
    """Base exception for PageMeter services."""

    pass


class BadRequestError(PageMeterException):
    """Raised when input is malformed or violates a policy the client can fix."""

    def __init__(self, message: Optional[str] = "Invalid request"):
        """Create a new BadRequestError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class NotFoundException(PageMeterException):
    """Exception raised when an object is not found."""

    def __init__(self, message: Optional[str] = "Object not found"):
        """Create a new NotFoundException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class UnauthorizedException(PageMeterException):
    """Exception raised when the caller's identity could not be established."""

    def __init__(self, message: Optional[str] = "Invalid or missing authentication token"):
        """Create a new UnauthorizedException instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class InvalidStateError(PageMeterException):
    """Exception raised when an object is in an invalid state for the requested action.

    Business-rule rejections (e.g. not enough credits) derive from this.
    """

    def __init__(self, message: Optional[str] = "Object is in an invalid state"):
        """Create a new InvalidStateError instance.

        Args:
        ----
            message (str, optional): The error message. Has default message.

        """
        self.message = message
        super().__init__(self.message)


class ExternalServiceError(PageMeterException):
    """Exception raised when an external service (database, identity provider) fails."""

    def __init__(self, service_name: str, message: Optional[str] = "External service failed"):
        """Create a new ExternalServiceError instance.

        Args:
        ----
            service_name (str): The name of the external service.
            message (str, optional): The error message. Has default message.

        """
        self.service_name = service_name
        self.message = message
        super().__init__(f"{service_name}: {message}")


def unpack_validation_error(exc: ValidationError) -> dict:
    """Unpack a Pydantic validation error into a dictionary.

    Args:
    ----
        exc (ValidationError): The Pydantic validation error.

    Returns:
    -------
        dict: The dictionary representation of the validation error.

    """
    error_messages = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"])
        message = error["msg"]
        error_messages.append({field: message})

    return {"errors": error_messages}
