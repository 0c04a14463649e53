import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


def repository_unavailable(error, source: str) -> Response:
    """
    503 response for a failed task repository call.

    Args:
        error: The RepositoryError raised by the repository
        source: Which view failed, for the log line

    Returns:
        Response with the ``repository_unavailable`` error body
    """
    logger.error(f"{source}: task repository unavailable: {str(error)}")
    return Response(
        {'error': 'repository_unavailable', 'detail': str(error)},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
