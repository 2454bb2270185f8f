"""
Custom exception hierarchy for the EventPix backend.

Used by the matching pipeline, use cases and controllers. All domain
exceptions inherit from EventPixError and can carry a user-facing message.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------


class EventPixError(Exception):
    """Base exception for all EventPix errors."""

    def __init__(
        self,
        message: str,
        user_message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.user_message = user_message or "An error occurred. Please try again."
        self.details = details or {}


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


class ValidationError(EventPixError):
    """Raised when input validation fails."""

    def __init__(self, message: str, user_message: Optional[str] = None, **kwargs):
        super().__init__(message, user_message=user_message or message, **kwargs)


class NoFaceFoundError(ValidationError):
    """Raised when an image that must contain a face has none."""

    def __init__(self, message: str = "No face found", **kwargs):
        super().__init__(message, **kwargs)


class MultipleFacesError(ValidationError):
    """Raised when a guest selfie contains more than one face."""

    def __init__(self, face_count: int):
        super().__init__(
            f"Expected exactly one face in the selfie, found {face_count}",
            user_message="Please submit a selfie with only your face in it.",
            details={"face_count": face_count},
        )
        self.face_count = face_count


class InvalidEmbeddingError(ValidationError):
    """Raised when an embedding is empty, degenerate or of the wrong dimensionality."""
    pass


# -----------------------------------------------------------------------------
# Lookup
# -----------------------------------------------------------------------------


class NotFoundError(EventPixError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} not found: {entity_id}",
            user_message=f"{entity} not found.",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


# -----------------------------------------------------------------------------
# Database
# -----------------------------------------------------------------------------


class DatabaseError(EventPixError):
    """Base exception for database errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        retryable: bool = False,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.retryable = retryable


class TransactionConflictError(DatabaseError):
    """Raised when a transaction aborts because of a concurrent write."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            user_message="The data changed while saving. Please try again.",
            retryable=True,
            **kwargs,
        )


class NamingFailedError(DatabaseError):
    """Raised when a naming / auto-tag transaction cannot be committed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            user_message="Naming failed. No faces were changed, please try again.",
            retryable=False,
            **kwargs,
        )


# -----------------------------------------------------------------------------
# External services
# -----------------------------------------------------------------------------


class ExternalServiceError(EventPixError):
    """Base exception for external service errors."""

    def __init__(
        self,
        message: str,
        service_name: Optional[str] = None,
        retryable: bool = True,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.service_name = service_name
        self.retryable = retryable


class DetectionServiceError(ExternalServiceError):
    """Raised when the face detection service cannot be used."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            service_name="Detection",
            user_message="Face detection is temporarily unavailable. Please try again.",
            retryable=True,
            **kwargs,
        )


class StorageError(ExternalServiceError):
    """Raised when writing or deleting an image blob fails."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message,
            service_name="Storage",
            user_message="Image storage is temporarily unavailable. Please try again.",
            retryable=True,
            **kwargs,
        )


# -----------------------------------------------------------------------------
# Messaging
# -----------------------------------------------------------------------------


class MessagingError(EventPixError):
    """Base exception for chat messaging errors."""
    pass


class SessionNotConnectedError(MessagingError):
    """Raised when a message is sent while the messaging session is not connected."""

    def __init__(self, state: str):
        super().__init__(
            f"Messaging session is not connected (state={state})",
            user_message="Messaging is not connected.",
            details={"state": state},
        )
        self.state = state


class MessageSendError(MessagingError):
    """Raised when the chat network rejects an outbound message."""
    pass


class CredentialsRejectedError(MessagingError):
    """Raised when stored session credentials are no longer accepted."""
    pass


# -----------------------------------------------------------------------------
# Safe user-facing message
# -----------------------------------------------------------------------------

def get_user_message(exc: BaseException) -> str:
    """
    Return a safe, user-facing message for any exception.
    Use this at API/use-case boundaries so internal details are never exposed.
    """
    if isinstance(exc, EventPixError) and getattr(exc, "user_message", None):
        return exc.user_message
    return "Something went wrong. Please try again."
