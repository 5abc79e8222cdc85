from fastapi import Request
import uuid

from pollgate.core.constants import SecurityHeaders


async def security_headers_middleware(request: Request, call_next):
    """Tag the request with an ID and attach the standard security headers to the response"""
    request_id = request.headers.get(SecurityHeaders.REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
    request.state.request_id = request_id

    response = await call_next(request)

    for header, value in SecurityHeaders.DEFAULTS.items():
        response.headers.setdefault(header, value)
    response.headers[SecurityHeaders.REQUEST_ID_HEADER] = request_id
    return response
