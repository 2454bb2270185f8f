# Standard library imports
import logging

# External package imports
from fastapi import HTTPException, status

# Local application imports
from ...domain.exceptions import (
    DatabaseError,
    ExternalServiceError,
    MessagingError,
    NamingFailedError,
    NotFoundError,
    TransactionConflictError,
    ValidationError,
    get_user_message,
)

logger = logging.getLogger(__name__)


def to_http_exception(exception: Exception) -> HTTPException:
    """
    Map a domain exception to an HTTPException with a safe user-facing detail.
    
    validation -> 400, not found -> 404, naming failure / conflict -> 409,
    external service or messaging -> 503, anything else -> 500.
    """
    if isinstance(exception, ValidationError):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exception, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exception, (NamingFailedError, TransactionConflictError)):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exception, (ExternalServiceError, MessagingError)):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(exception, DatabaseError):
        logger.error(f"Database error: {exception}", exc_info=exception)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        logger.error(f"Unexpected error: {exception}", exc_info=exception)
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    
    return HTTPException(status_code=status_code, detail=get_user_message(exception))
