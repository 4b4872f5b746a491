"""
Diagnostics formatting for the last HTTP call.

Pure formatting: no state, and nothing in here raises on odd input.
Values json cannot encode are stringified as-is.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .schemas import RequestTrace

NO_TRACE = "No requests made yet."


def _pretty(body: Any) -> str:
    try:
        return json.dumps(body, indent=2, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(body)


class DiagnosticsReporter:

    @staticmethod
    def render(trace: Optional[RequestTrace]) -> str:
        """Method / URL / Status / Timestamp, then the body as pretty JSON."""
        if trace is None:
            return NO_TRACE
        when = trace.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
        status = trace.status if trace.status is not None else "no response"
        return (
            f"Method: {trace.method}\n"
            f"URL: {trace.url}\n"
            f"Status: {status}\n"
            f"Timestamp: {when}\n"
            f"\n"
            f"Data: {_pretty(trace.body)}"
        )

    @staticmethod
    def as_dict(trace: Optional[RequestTrace]) -> Optional[Dict[str, Any]]:
        """JSON-ready form of a trace, for the diagnostics endpoint."""
        if trace is None:
            return None
        return {
            "method": trace.method,
            "url": trace.url,
            "status": trace.status,
            "body": trace.body if _is_json(trace.body) else str(trace.body),
            "timestamp": trace.timestamp.isoformat(),
        }


def _is_json(body: Any) -> bool:
    try:
        json.dumps(body)
    except (TypeError, ValueError):
        return False
    return True
