"""
Pydantic schemas.

Why:
- One shape for what we send to and read back from the remote collection
- Validation of server payloads happens before anything touches the store
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class LocationDraft(BaseModel):
    """
    A saved location that has not been created remotely yet.
    Drafts only live in form state; they never enter the store.
    """
    name: str = ""
    city: str = ""
    country: str = ""
    notes: str = ""


class LocationUpdate(BaseModel):
    """
    Partial changes for an existing saved location.
    Fields left as None keep their current value.
    """
    name: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    notes: Optional[str] = None


class SavedLocation(BaseModel):
    """
    A saved location as stored locally, `id` assigned by the backend.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str
    city: str = ""
    country: str = ""
    notes: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SavedLocation":
        """
        Build a record from a collection response item.

        The placeholder backend stores "posts"; items that were never created
        through this client only have `title`/`body`, so those stand in for
        `name`/`notes`.
        """
        return cls(
            id=payload.get("id"),
            name=payload.get("name") or payload.get("title") or "",
            city=payload.get("city") or "",
            country=payload.get("country") or "",
            notes=payload.get("notes") or payload.get("body") or "",
        )

    def request_body(self) -> Dict[str, Any]:
        """Fields sent to the backend (everything except the id)."""
        return self.model_dump(exclude={"id"})


class WeatherSnapshot(BaseModel):
    """Current conditions for one city. Built per lookup, never stored."""
    model_config = ConfigDict(frozen=True)

    city_name: str
    country_code: str
    condition_main: str
    condition_description: str
    temperature_c: float
    feels_like_c: float
    humidity_pct: float
    wind_speed: float


class RequestTrace(BaseModel):
    """
    Diagnostics for the most recent HTTP call.
    `url` is always the redacted form; `status` is None when no response arrived.
    """
    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    status: Optional[int] = None
    body: Any = None
    timestamp: datetime
