"""
Request logging for task mutations.
"""
import logging

logger = logging.getLogger(__name__)

SAFE_METHODS = ('GET', 'HEAD', 'OPTIONS')


class TaskMutationLoggingMiddleware:
    """
    Log every write request against the task API together with its outcome.

    The JWT user is only resolved inside the DRF view, so the acting user is
    logged there (and by the engine for rejections), not here.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        if request.method not in SAFE_METHODS and '/tasks/' in request.path:
            logger.info(f"{request.method} {request.path}: status={response.status_code}")

        return response
