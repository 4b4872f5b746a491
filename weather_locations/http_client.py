"""
Thin async HTTP wrapper shared by the weather lookup and the sync service.

Every call:
- is issued exactly once (no retries)
- returns status + parsed JSON, leaving status handling to the caller
- overwrites the single live RequestTrace used for diagnostics
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from .errors import NetworkError, ParseError
from .schemas import RequestTrace

logger = logging.getLogger(__name__)

# Query parameters whose values are credentials
SECRET_PARAMS = ("appid", "api_key", "apikey", "key")
REDACTED = "API_KEY_HIDDEN"

TraceListener = Callable[[RequestTrace], None]


@dataclass(frozen=True)
class HttpResponse:
    status: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def redact_url(url: httpx.URL) -> str:
    """Replace credential-bearing query values with a fixed placeholder."""
    for name in SECRET_PARAMS:
        if name in url.params:
            url = url.copy_set_param(name, REDACTED)
    return str(url)


class HttpClient:
    """
    Issues one request per call and records it as the live trace.

    `transport` is handed to httpx untouched; tests pass an
    `httpx.MockTransport` here.
    """

    def __init__(self, timeout_s: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout_s = timeout_s
        self.transport = transport
        self.trace: Optional[RequestTrace] = None
        self.call_count = 0
        self._listeners: List[TraceListener] = []

    def subscribe(self, listener: TraceListener) -> None:
        """Register a callable that receives every new trace."""
        self._listeners.append(listener)

    async def request(
        self,
        method: str,
        url: str,
        body: Any = None,
        params: Optional[Dict[str, Any]] = None,
        parse_json: bool = True,
    ) -> HttpResponse:
        """
        Issue one request. Non-JSON bodies come back as text unless the
        response is 2xx and `parse_json` is set, which raises ParseError.
        """
        method = method.upper()
        full_url = httpx.URL(url, params=params) if params else httpx.URL(url)
        shown_url = redact_url(full_url)

        self.call_count += 1
        logger.debug("%s %s", method, shown_url)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.request(method, full_url, json=body)
        except httpx.TransportError as e:
            message = f"Network error: {e}" if str(e) else f"Network error: {type(e).__name__}"
            self._record(method, shown_url, None, {"error": message})
            raise NetworkError(message) from e

        if not r.content:
            self._record(method, shown_url, r.status_code, None)
            return HttpResponse(status=r.status_code, data=None)

        try:
            data = r.json()
        except ValueError as e:
            self._record(method, shown_url, r.status_code, r.text)
            if not parse_json or not r.is_success:
                return HttpResponse(status=r.status_code, data=r.text)
            raise ParseError(f"Response from {method} {shown_url} is not valid JSON") from e

        self._record(method, shown_url, r.status_code, data)
        return HttpResponse(status=r.status_code, data=data)

    def _record(self, method: str, url: str, status: Optional[int], body: Any) -> None:
        self.trace = RequestTrace(
            method=method,
            url=url,
            status=status,
            body=body,
            timestamp=datetime.now(timezone.utc),
        )
        for listener in self._listeners:
            listener(self.trace)
