"""
Service-layer error kinds and their mapping to API responses.

Kinds:
    - DomainValidationError: input breaks a business rule (400)
    - NotFoundError: referenced entity id does not exist (404)
    - ReferentialIntegrityError: a restrict policy blocked a delete (409)
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the domain services."""
    error_label = 'Service Error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DomainValidationError(ServiceError):
    """Raised when input fails a business rule."""
    error_label = 'Validation Error'
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    """Raised when a referenced entity id does not exist."""
    error_label = 'Not Found'
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id, field: str = 'id'):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found with {field}: {entity_id}")


class ReferentialIntegrityError(ServiceError):
    """Raised by the persistence gateway when dependents block a delete."""
    error_label = 'Conflict'
    status_code = status.HTTP_409_CONFLICT


def api_exception_handler(exc, context):
    """
    DRF exception handler translating service errors into responses.

    Everything else goes through DRF's default handler.
    """
    if isinstance(exc, ServiceError):
        view = context.get('view')
        logger.warning(
            f"{exc.error_label} in {view.__class__.__name__ if view else 'view'}: {exc.message}"
        )
        return Response(
            {'error': exc.error_label, 'detail': exc.message},
            status=exc.status_code
        )
    return exception_handler(exc, context)
