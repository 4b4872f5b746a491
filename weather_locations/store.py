"""
In-memory, insertion-ordered collection of saved locations.

The store is the single source of truth for what gets rendered. Readers get
tuples (snapshots); only the sync service calls the mutating methods.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from .errors import DuplicateIdError, NotFoundError, ValidationError
from .schemas import SavedLocation


class LocationStore:

    def __init__(self, records: Iterable[SavedLocation] = ()):
        # dicts keep insertion order; replace() keeps the original slot
        self._records: Dict[int, SavedLocation] = {}
        self.reset(records)

    def all(self) -> Tuple[SavedLocation, ...]:
        return tuple(self._records.values())

    def get(self, location_id: int) -> Optional[SavedLocation]:
        return self._records.get(location_id)

    def __contains__(self, location_id: object) -> bool:
        return location_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: SavedLocation) -> None:
        _require_id(record)
        if record.id in self._records:
            raise DuplicateIdError(f"Location {record.id} is already saved")
        self._records[record.id] = record

    def remove(self, location_id: int) -> None:
        """Remove a location; removing an unknown id is a no-op."""
        self._records.pop(location_id, None)

    def replace(self, location_id: int, record: SavedLocation) -> None:
        if location_id not in self._records:
            raise NotFoundError(f"Location {location_id} not found")
        _require_id(record)
        if record.id != location_id and record.id in self._records:
            raise DuplicateIdError(f"Location {record.id} is already saved")

        # rebuild so a changed id keeps the same position
        self._records = {
            (record.id if key == location_id else key): (record if key == location_id else value)
            for key, value in self._records.items()
        }

    def reset(self, records: Iterable[SavedLocation]) -> None:
        """
        Swap in a whole new collection.
        Everything is validated first; on error the old contents stay.
        """
        fresh: Dict[int, SavedLocation] = {}
        for record in records:
            _require_id(record)
            if record.id in fresh:
                raise DuplicateIdError(f"Location {record.id} appears more than once")
            fresh[record.id] = record
        self._records = fresh


def _require_id(record: SavedLocation) -> None:
    if record.id is None:
        raise ValidationError("Only locations created remotely (with an id) can be stored")
