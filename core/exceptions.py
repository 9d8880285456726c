"""Typed exceptions for booking-flow programming errors.

User-recoverable problems (empty cart, missing signature, rejected file) are
published as UserNotice events instead; these exceptions mean the caller
invoked an action that the current state does not allow.
"""


class BookingError(Exception):
    """Base class for booking core errors."""


class InvalidPhaseTransition(BookingError):
    """Action is not defined for the current booking phase."""

    def __init__(self, action: str, phase):
        self.action = action
        self.phase = phase
        super().__init__(f"Cannot {action} while booking phase is '{phase.value}'")


class InvalidSignatureStep(BookingError):
    """Contract signature action is not valid for the current step."""

    def __init__(self, action: str, step):
        self.action = action
        self.step = step
        super().__init__(f"Cannot {action} while signature step is '{step.value}'")


class UploadControllerClosed(BookingError):
    """Upload controller was closed; no further uploads may start."""
