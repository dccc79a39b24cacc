# lims_core/common/middleware.py
import logging
import time
import uuid

logger = logging.getLogger("lims_core.request")


class RequestLogMiddleware:
    """
    Stamps request.request_id (reused by the error envelope) and writes one
    structured access-log line per request.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.request_id = request_id

        response = self.get_response(request)

        duration = f"{time.time() - start_time:.3f}"

        forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
        real_ip = forwarded.split(",")[0] if forwarded else request.META.get("REMOTE_ADDR")

        user_info = "-"
        if hasattr(request, "user") and request.user.is_authenticated:
            user_info = f"{request.user.id}:{getattr(request.user, 'username', 'unknown')}"

        logger.info(
            {
                "remote_addr": request.META.get("REMOTE_ADDR", "-"),
                "real_ip": real_ip,
                "request": f"{request.method} {request.get_full_path()}",
                "request_id": request_id,
                "user": user_info,
                "status": str(response.status_code),
                "request_time": duration,
            }
        )

        response["X-Request-ID"] = request_id
        return response
