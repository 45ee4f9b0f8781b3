"""
In-memory versioned room store with optimistic transactions.

Rooms are kept as plain documents. A transaction reads a document, computes
a patch outside the lock, and commits only if nobody wrote the document in
between; otherwise the whole read-compute-write cycle runs again.
"""

import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from .diff import apply_patch
from .errors import RoomAlreadyExists, RoomNotFound, TransactionConflict
from .models import Room, RoomPatch
from .serialization import room_from_snapshot, room_to_dict

logger = logging.getLogger(__name__)

TransactionFn = Callable[[Room], Optional[RoomPatch]]


class InMemoryRoomStore:
    """Room documents keyed by room code."""

    def __init__(self, max_retries: int = 5, clock: Callable[[], float] = time.time):
        self.max_retries = max_retries
        self.clock = clock
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._documents

    def _read(self, code: str) -> Tuple[int, Dict[str, Any]]:
        with self._lock:
            document = self._documents.get(code)
            if document is None:
                raise RoomNotFound(f"Room {code} does not exist")
            return document.get("version", 0), copy.deepcopy(document)

    def get(self, code: str) -> Room:
        """Read the current snapshot of a room."""
        _, document = self._read(code)
        return room_from_snapshot(document)

    def get_document(self, code: str) -> Dict[str, Any]:
        """Read the raw stored document."""
        return self._read(code)[1]

    def put_document(self, code: str, document: Dict[str, Any]) -> None:
        """Overwrite a raw document, bypassing transactions."""
        with self._lock:
            self._documents[code] = copy.deepcopy(document)

    def create(self, room: Room) -> Room:
        """Insert a new room; fails if the code is taken."""
        now = self.clock()
        created = apply_patch(room, {"version": 1, "updated_at": now})
        with self._lock:
            if room.code in self._documents:
                raise RoomAlreadyExists(f"Room code {room.code} is already in use")
            self._documents[room.code] = room_to_dict(created)
        logger.info(f"Created room {room.code}")
        return created

    def delete(self, code: str) -> None:
        with self._lock:
            self._documents.pop(code, None)

    def transactionally(self, code: str, fn: TransactionFn) -> Room:
        """
        Run ``fn`` against the latest snapshot and commit its patch atomically.

        ``fn`` may run several times; errors it raises propagate immediately
        and are not retried.

        Returns:
            The committed room (or the unchanged snapshot for an empty patch)
        """
        for attempt in range(1, self.max_retries + 1):
            version, document = self._read(code)
            room = room_from_snapshot(document)

            patch = fn(room)
            if not patch:
                return room

            updated = apply_patch(room, {**patch, "version": version + 1, "updated_at": self.clock()})
            new_document = room_to_dict(updated)

            with self._lock:
                current = self._documents.get(code)
                if current is None:
                    raise RoomNotFound(f"Room {code} was deleted")
                if current.get("version", 0) == version:
                    self._documents[code] = new_document
                    return updated

            logger.warning(
                f"Write conflict on room {code} at version {version} "
                f"(attempt {attempt}/{self.max_retries}), retrying"
            )

        logger.error(f"Giving up on room {code} after {self.max_retries} conflicting attempts")
        raise TransactionConflict(
            f"Room {code} kept changing; gave up after {self.max_retries} attempts"
        )
