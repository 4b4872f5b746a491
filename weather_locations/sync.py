"""
Saved-location synchronization.

The service is the only writer of the LocationStore. Each operation runs
validate -> request -> apply-to-store in that order and the store is written
only after the response has been fully parsed, so a failure at any step
leaves it exactly as it was.

Operations are independent: there is no lock, and two operations on the same
id race with the last response applied.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

import pydantic

from .errors import LocationsError, NotFoundError, ParseError, RemoteError, ValidationError
from .http_client import HttpClient
from .schemas import LocationDraft, LocationUpdate, SavedLocation
from .store import LocationStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "city", "country", "notes")
REQUIRED_FIELDS = ("name", "city")


class OperationState(str, enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass(frozen=True)
class SyncOutcome:
    """One state transition of one operation, as seen by observers."""
    operation: str
    state: OperationState
    record_id: Optional[int] = None
    record: Optional[SavedLocation] = None
    error: Optional[LocationsError] = None


SyncListener = Callable[[SyncOutcome], None]


def _error_message(data: Any, default: str) -> str:
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return default


def _usable_echo(field: str, value: Any) -> bool:
    # name and city must stay non-empty
    if value is None:
        return False
    return field not in REQUIRED_FIELDS or bool(str(value).strip())


def _coerce_input(model: type, value: Any) -> Any:
    if isinstance(value, model):
        return value
    try:
        return model.model_validate(value)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid location fields: {e}") from e


def _parse_record(payload: Any) -> SavedLocation:
    if not isinstance(payload, dict):
        raise ParseError("Expected a saved location object in the response")
    try:
        record = SavedLocation.from_payload(payload)
    except pydantic.ValidationError as e:
        raise ParseError(f"Malformed saved location in response: {e}") from e
    if record.id is None:
        raise ParseError("Saved location in response has no id")
    return record


class LocationSyncService:
    """
    CRUD against the remote collection endpoint:
        GET    <base>
        POST   <base>
        PUT    <base>/{id}
        DELETE <base>/{id}
    """

    def __init__(self, http: HttpClient, store: LocationStore, base_url: str, refresh_limit: Optional[int] = None):
        self.http = http
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.refresh_limit = refresh_limit
        self._listeners: List[SyncListener] = []

    def subscribe(self, listener: SyncListener) -> None:
        self._listeners.append(listener)

    def _emit(self, outcome: SyncOutcome) -> None:
        for listener in self._listeners:
            listener(outcome)

    async def _track(self, operation: str, record_id: Optional[int], work: Callable[[], Awaitable[Any]]) -> Any:
        """Run one operation through IN_FLIGHT -> COMMITTED | FAILED."""
        self._emit(SyncOutcome(operation, OperationState.IN_FLIGHT, record_id))
        try:
            result = await work()
        except LocationsError as e:
            logger.warning("%s %s failed: %s", operation, record_id if record_id is not None else "", e)
            self._emit(SyncOutcome(operation, OperationState.FAILED, record_id, error=e))
            raise

        record = result if isinstance(result, SavedLocation) else None
        if record is not None:
            record_id = record.id
        logger.info("%s %s committed", operation, record_id if record_id is not None else "")
        self._emit(SyncOutcome(operation, OperationState.COMMITTED, record_id, record=record))
        return result

    # -------------------------
    # Create
    # -------------------------

    async def create(self, draft: Union[LocationDraft, Dict[str, Any]]) -> SavedLocation:
        """
        CREATE:
        - name and city are required (checked locally)
        - POST the draft
        - store the record the server echoed back, with its assigned id
        """
        draft = _coerce_input(LocationDraft, draft)
        if not draft.name.strip() or not draft.city.strip():
            raise ValidationError("Location name and city are required")

        async def work() -> SavedLocation:
            r = await self.http.request("POST", self.base_url, body=draft.model_dump())
            if not r.ok:
                raise RemoteError(r.status, _error_message(r.data, "Failed to save location"))

            record = _parse_record(r.data)
            self.store.add(record)
            return record

        return await self._track("create", None, work)

    # -------------------------
    # Update
    # -------------------------

    async def update(self, location_id: int, changes: Union[LocationUpdate, Dict[str, Any]]) -> SavedLocation:
        """
        UPDATE:
        - the id must currently be in the store (no request otherwise)
        - PUT the existing record merged with the changes
        - merge the response into the existing record and replace it
        """
        existing = self.store.get(location_id)
        if existing is None:
            raise NotFoundError(f"Location {location_id} not found")

        changes = _coerce_input(LocationUpdate, changes)
        for field in REQUIRED_FIELDS:
            value = getattr(changes, field)
            if value is not None and not value.strip():
                raise ValidationError(f"Location {field} cannot be empty")

        merged = existing.model_copy(update=changes.model_dump(exclude_none=True))

        async def work() -> SavedLocation:
            r = await self.http.request("PUT", f"{self.base_url}/{location_id}", body=merged.model_dump())
            if not r.ok:
                raise RemoteError(r.status, _error_message(r.data, "Failed to update location"))

            echoed = r.data if isinstance(r.data, dict) else {}
            fields = merged.model_dump()
            fields.update({k: echoed[k] for k in EDITABLE_FIELDS if _usable_echo(k, echoed.get(k))})
            fields["id"] = location_id
            try:
                record = SavedLocation.model_validate(fields)
            except pydantic.ValidationError as e:
                raise ParseError(f"Malformed saved location in response: {e}") from e

            self.store.replace(location_id, record)
            return record

        return await self._track("update", location_id, work)

    # -------------------------
    # Delete
    # -------------------------

    async def delete(self, location_id: int) -> None:
        """
        DELETE (the caller has already confirmed the intent).
        Any 2xx removes the local record, whatever the body looks like.
        """
        async def work() -> None:
            r = await self.http.request("DELETE", f"{self.base_url}/{location_id}", parse_json=False)
            if not r.ok:
                raise RemoteError(r.status, _error_message(r.data, "Failed to delete location"))
            self.store.remove(location_id)

        await self._track("delete", location_id, work)

    # -------------------------
    # Refresh
    # -------------------------

    async def refresh_all(self, limit: Optional[int] = None) -> Tuple[SavedLocation, ...]:
        """
        Fetch the whole collection and swap it into the store in one step.
        """
        limit = limit if limit is not None else self.refresh_limit
        params = {"_limit": limit} if limit is not None else None

        async def work() -> Tuple[SavedLocation, ...]:
            r = await self.http.request("GET", self.base_url, params=params)
            if not r.ok:
                raise RemoteError(r.status, _error_message(r.data, "Failed to load saved locations"))
            if not isinstance(r.data, list):
                raise ParseError("Expected a list of saved locations")

            records = [_parse_record(item) for item in r.data]
            self.store.reset(records)
            return self.store.all()

        return await self._track("refresh", None, work)
