"""
Exceptions raised by imucal components.

Detection failures are not exceptions: they are reported through
DetectionErrorEvent and the FAILED detector status. Invalid configuration
values are rejected by pydantic with a ValidationError (a ValueError).
"""


class ImucalError(Exception):
    """Base class for all imucal exceptions."""


class LockedError(ImucalError, RuntimeError):
    """
    Raised when a component is modified or re-entered while it is running.

    The running flag is a plain attribute used to catch re-entrant calls made
    from listeners. It is not a thread lock: components are single-threaded.
    """

    def __init__(self, component: str = ""):
        message = f"{component} is running" if component else "Component is running"
        super().__init__(message)
        self.component = component
