from typing import Any, Optional


class RegistrationError(Exception):
    """Base class for anything that stops a DID registration."""


class ValidationError(RegistrationError):
    """The registration request was rejected before anything was sent."""


class TransportError(RegistrationError):
    """
    The PLC directory could not be reached or answered with a non-2xx status.

    status and body are None when no HTTP response was received
    (DNS failure, refused connection, timeout).
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body
