# backend/lab_core/common/middleware.py
from __future__ import annotations

import logging

from django.utils.deprecation import MiddlewareMixin

from lab_core.common.api.exceptions import ensure_request_id

logger = logging.getLogger(__name__)


class RequestIdMiddleware(MiddlewareMixin):
    """
    Attaches request.request_id (honouring an incoming X-Request-ID) so the
    error envelope and log lines of one request share an id.
    """

    HEADER_META_KEY = "HTTP_X_REQUEST_ID"
    RESPONSE_HEADER = "X-Request-ID"

    def process_request(self, request):
        incoming = (request.META.get(self.HEADER_META_KEY) or "").strip()
        if incoming and len(incoming) <= 64:
            request.request_id = incoming
        ensure_request_id(request)
        return None

    def process_response(self, request, response):
        rid = ensure_request_id(request)
        response[self.RESPONSE_HEADER] = rid
        if response.status_code >= 400:
            logger.info("%s %s -> %s [%s]", request.method, request.path, response.status_code, rid)
        return response
