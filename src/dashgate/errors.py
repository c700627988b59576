"""Gate errors.

Each maps to one rejecting outcome of the access gate. Messages are what
the dashboard client shows the operator, so they name the fix and never
carry credential material.
"""

from typing import Optional


class GateError(Exception):
    """Base class for requests the access gate refuses."""

    message = "Something went wrong."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class InsecureTransportError(GateError):
    """Remote request over plain HTTP."""

    message = "Parse Dashboard can only be remotely accessed via HTTPS"


class AuthenticationRequiredError(GateError):
    """Remote request while no users are configured."""

    message = "Configure a user to access Parse Dashboard remotely"


class AuthenticationFailedError(GateError):
    """Users are configured and the request did not present a matching pair.

    Answered with a 401 Basic challenge, not a JSON error body.
    """

    message = "Authorization Required"


class UnexpectedStateError(GateError):
    """No gate branch matched. Reaching this is a bug in the gate."""

    message = "Something went wrong."
