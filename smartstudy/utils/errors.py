"""
Error taxonomy for SmartStudy services.

Every error carries a message that can be shown to the user as-is.
"""


class SmartStudyError(Exception):
    """Base class for all service-layer errors"""

    default_message = "Something went wrong"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SmartStudyError):
    """Bad input shape or length (password too short, mismatch, empty word)"""
    default_message = "Invalid input"


class AuthError(SmartStudyError):
    """No active session, or credentials rejected"""
    default_message = "Not authenticated"


class ConflictError(SmartStudyError):
    """Record already exists (duplicate signup email)"""
    default_message = "Already exists"


class NotFoundError(SmartStudyError):
    """Record absent or not owned by the current user"""
    default_message = "Not found"


class RemoteError(SmartStudyError):
    """Backing store or HTTP layer failure"""
    default_message = "Request failed. Please try again."
