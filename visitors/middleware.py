import logging
import time

logger = logging.getLogger('visitors.requests')


class RequestLogMiddleware:
    """Log method, path, status and latency of every API request."""
    PREFIXES = ('/api/',)

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = request.path or ''
        if not any(path.startswith(p) for p in self.PREFIXES):
            return self.get_response(request)
        started = time.monotonic()
        response = self.get_response(request)
        user = getattr(request, 'user', None)
        logger.info(
            '%s %s -> %s (%.1f ms) user=%s',
            request.method, path, response.status_code,
            (time.monotonic() - started) * 1000,
            user.pk if user is not None and user.is_authenticated else '-',
        )
        return response
