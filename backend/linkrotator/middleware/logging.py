import time
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.validators import get_client_ip

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/api/admin"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and processing time"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        client_ip = get_client_ip(request)
        logger.info(f"Request: {request.method} {request.url.path} from {client_ip}")

        response = await call_next(request)

        process_time = time.time() - start_time
        tag = " [ADMIN]" if request.url.path.startswith(ADMIN_PATH_PREFIX) else ""
        logger.info(
            f"Response: {request.method} {request.url.path} "
            f"status={response.status_code} time={process_time:.4f}s{tag}"
        )

        response.headers["X-Process-Time"] = str(process_time)
        return response
