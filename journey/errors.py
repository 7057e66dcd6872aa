# journey/errors.py
from typing import Optional, Sequence


class JourneyError(Exception):
    """Base error; `message` is what the UI shows to the student"""

    message = "An unknown error occurred"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class ConfigurationError(JourneyError):
    message = "Invalid configuration"


# Store errors

class StoreError(JourneyError):
    message = "Document store error"


class NotAuthenticatedError(StoreError):
    message = "User is not authenticated"


class DocumentNotFoundError(StoreError):
    message = "Document not found"


class MalformedDocumentError(StoreError):
    message = "Invalid data format"

    def __init__(self, model: str, missing: Sequence[str] = (), detail: Optional[str] = None):
        self.model = model
        self.missing = list(missing)
        text = f"Invalid data format for {model}"
        if self.missing:
            text += f" (missing: {', '.join(self.missing)})"
        elif detail:
            text += f" ({detail})"
        super().__init__(text)


class UnknownStoreError(StoreError):
    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


# Auth errors

class AuthenticationError(JourneyError):
    message = "Authentication failed"


# AI service errors

class AIServiceError(JourneyError):
    message = "An unknown error occurred"


class AINetworkError(AIServiceError):
    message = "Network error occurred"


class InvalidAIResponseError(AIServiceError):
    message = "Invalid response from AI service"


class UnknownAIError(AIServiceError):
    message = "An unknown error occurred"
