# clearwater/errors.py
class ClearWaterError(Exception):
    """Base class for errors raised by clearwater."""


class InvalidInputError(ClearWaterError, ValueError):
    """User input rejected before any upstream call.

    ``message`` is safe to show to the user as-is.
    """

    message = "Invalid input."

    def __init__(self, value: str = "", message: str | None = None):
        self.value = value
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidZipError(InvalidInputError):
    message = "Please enter a valid 5-digit ZIP code."


class InvalidPwsidError(InvalidInputError):
    message = "Invalid water system ID."


class InvalidStateError(InvalidInputError):
    message = "Unknown state code."
