#!/usr/bin/env python3
"""
Asana HTTP Transports

The client performs every HTTP exchange through a transport: any object
with a ``send(request) -> requests.Response`` method. This is the single
seam for authentication, proxies, instrumentation or test doubles.

A plain ``requests.Session`` already satisfies the interface.
"""

import logging
from typing import Callable, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30


class Transport(Protocol):
    """Performs one HTTP exchange."""

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        ...


class TransportFunc:
    """
    Adapts a plain callable to the transport interface.

    Example:
        def fake(request):
            return canned_response

        client = AsanaClient(TransportFunc(fake))
    """

    def __init__(self, func: Callable[[requests.PreparedRequest], requests.Response]):
        self._func = func

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        return self._func(request)


class HTTPTransport:
    """
    Sends requests over a pooled requests session with a per-exchange timeout.

    Timeouts are the only cancellation mechanism; nothing is retried here.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = REQUEST_TIMEOUT,
    ):
        self._session = session or requests.Session()
        self.timeout = timeout

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        response = self._session.send(request, **kwargs)
        logger.debug(f"{request.method} {request.url} -> HTTP {response.status_code}")
        return response

    def close(self) -> None:
        self._session.close()


class BearerTokenTransport(HTTPTransport):
    """HTTPTransport that authenticates with a personal access or OAuth token."""

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = REQUEST_TIMEOUT,
    ):
        if not token:
            raise ValueError("A non-empty access token is required")
        super().__init__(session=session, timeout=timeout)
        self._token = token

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        request.headers["Authorization"] = f"Bearer {self._token}"
        return super().send(request, **kwargs)
