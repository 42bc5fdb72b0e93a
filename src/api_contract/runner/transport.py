"""HTTP transport used by the runner.

The runner only needs ``do(request) -> response``. RequestsTransport is the
default; FuncTransport adapts a plain callable (handy for stubs in tests).
"""

import logging
from typing import Callable, Protocol, runtime_checkable

import requests
from pydantic import BaseModel

from api_contract.errors import TransportError

logger = logging.getLogger(__name__)


class HttpRequest(BaseModel):
    method: str
    url: str
    headers: dict[str, str] = {}
    body: bytes | None = None


class HttpResponse(BaseModel):
    status_code: int
    headers: dict[str, str] = {}
    body: bytes = b""

    def header(self, name: str) -> str:
        """Case-insensitive header lookup; missing headers read as ''."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return ""


@runtime_checkable
class Transport(Protocol):
    def do(self, request: HttpRequest) -> HttpResponse: ...


class FuncTransport:
    """Transport backed by a function ``request -> response``."""

    def __init__(self, func: Callable[[HttpRequest], HttpResponse]):
        self.func = func

    def do(self, request: HttpRequest) -> HttpResponse:
        return self.func(request)


class RequestsTransport:
    """Transport on top of a requests.Session.

    No timeout is applied unless one is given; deadline policy belongs to
    whoever constructs the transport.
    """

    def __init__(self, session: requests.Session | None = None, timeout: float | None = None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def do(self, request: HttpRequest) -> HttpResponse:
        logger.debug("%s %s", request.method, request.url)
        try:
            resp = self.session.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e

        return HttpResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=resp.content or b"",
        )
