import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

from app.metrics.prometheus import request_count, request_duration

log = logging.getLogger(__name__)


class RequestMetricsMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, slow_request_ms=1000, log_requests=False):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms
        self.log_requests = log_requests

    @staticmethod
    def endpoint_label(request):
        # route templates keep label cardinality bounded; raw paths carry ids
        route = request.scope.get('route')
        return getattr(route, 'path', None) or 'unmatched'

    async def dispatch(self, request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        endpoint = self.endpoint_label(request)
        request_count.labels(method=request.method, endpoint=endpoint, status=str(response.status_code)).inc()
        request_duration.labels(method=request.method, endpoint=endpoint).observe(process_time)
        response.headers['X-Process-Time'] = f"{process_time:.3f}"
        if self.log_requests or process_time * 1000 > self.slow_request_ms:
            log.info(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {process_time * 1000:.1f}ms"
            )
        return response
