"""
=============================================================================
COASTER STORE
=============================================================================

The one piece of shared mutable state in the server: a dict from id to
Coaster, guarded by a single threading.Lock.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        CoasterStore                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   worker 1 ──┐                                                       │
    │   worker 2 ──┼──► _lock ──► _coasters: {"4821": Coaster(...), ...}  │
    │   worker N ──┘                                                       │
    │                                                                      │
    │   list()       snapshot of all values          (one lock hold)      │
    │   insert(c)    assign random id, store, return (one lock hold)      │
    │   get(id)      lookup or None                  (one lock hold)      │
    │   random_id()  collect ids, then pick          (one lock hold)      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Reads and writes share the same exclusive lock. The lock is released
before anything slow happens (JSON encoding, socket writes), so holds are
short.

Ids are random integers in [0, 10000) rendered as text. Nothing checks for
an existing entry with the same id: a colliding insert replaces it.

=============================================================================
"""

import logging
import random
import threading
from typing import Dict, List, Optional

from .models import Coaster


logger = logging.getLogger(__name__)

# Upper bound (exclusive) for generated ids
ID_SPACE = 10000


class CoasterStore:
    """
    Thread-safe in-memory mapping of id to Coaster.

    Args:
        rng: Random source for id generation and random picks. Pass a seeded
             random.Random in tests to make both deterministic.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._coasters: Dict[str, Coaster] = {}
        self._lock = threading.Lock()
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        with self._lock:
            return len(self._coasters)

    def list(self) -> List[Coaster]:
        """Return a snapshot of every stored coaster, in no particular order."""
        with self._lock:
            return list(self._coasters.values())

    def insert(self, coaster: Coaster) -> str:
        """
        Store a coaster under a freshly generated id.

        Any id already on the record is discarded.

        Returns:
            The assigned id.
        """
        coaster_id = str(self._rng.randrange(ID_SPACE))
        stored = coaster.with_id(coaster_id)

        with self._lock:
            replaced = coaster_id in self._coasters
            self._coasters[coaster_id] = stored

        if replaced:
            logger.debug(f"Id {coaster_id} collided, previous coaster replaced")
        return coaster_id

    def get(self, coaster_id: str) -> Optional[Coaster]:
        """Look up a coaster by id. Returns None when absent."""
        with self._lock:
            return self._coasters.get(coaster_id)

    def random_id(self) -> Optional[str]:
        """
        Pick one stored id uniformly at random.

        Returns:
            None for an empty store, the only id when there is exactly one,
            otherwise a uniform pick.
        """
        with self._lock:
            ids = list(self._coasters)

        if not ids:
            return None
        if len(ids) == 1:
            return ids[0]
        return self._rng.choice(ids)
