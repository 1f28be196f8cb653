"""
Unit tests for CoasterStore.
"""

import random
import threading

from coasterserver.models import Coaster
from coasterserver.store import CoasterStore, ID_SPACE


class SequenceRandom(random.Random):
    """Hands out predetermined ids so collisions can be forced."""

    def __init__(self, ids):
        super().__init__(0)
        self._ids = list(ids)

    def randrange(self, *args, **kwargs):
        return self._ids.pop(0)


class TestInsert:

    def test_assigns_numeric_id_in_range(self, store: CoasterStore):
        coaster_id = store.insert(Coaster(name="Fury"))

        assert coaster_id.isdigit()
        assert 0 <= int(coaster_id) < ID_SPACE
        assert len(store) == 1

    def test_client_id_is_replaced(self, store: CoasterStore):
        coaster_id = store.insert(Coaster(name="Fury", id="client-chosen"))

        stored = store.get(coaster_id)
        assert stored.id == coaster_id
        assert stored.name == "Fury"

    def test_collision_replaces_previous_entry(self):
        store = CoasterStore(rng=SequenceRandom([7, 7]))

        assert store.insert(Coaster(name="first")) == "7"
        assert store.insert(Coaster(name="second")) == "7"

        assert len(store) == 1
        assert store.get("7").name == "second"

    def test_concurrent_inserts_are_not_lost(self):
        store = CoasterStore(rng=SequenceRandom(range(200)))
        barrier = threading.Barrier(8)

        def worker(offset):
            barrier.wait()
            for i in range(25):
                store.insert(Coaster(name=f"{offset}-{i}"))

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 200


class TestLookup:

    def test_get_missing(self, store: CoasterStore):
        assert store.get("42") is None

    def test_list_empty(self, store: CoasterStore):
        assert store.list() == []

    def test_list_is_snapshot(self, store: CoasterStore):
        store.insert(Coaster(name="Fury"))
        snapshot = store.list()

        store.insert(Coaster(name="Banshee"))

        assert len(snapshot) == 1


class TestRandomId:

    def test_empty(self, store: CoasterStore):
        assert store.random_id() is None

    def test_single_entry_is_deterministic(self, store: CoasterStore):
        coaster_id = store.insert(Coaster(name="Fury"))

        assert all(store.random_id() == coaster_id for _ in range(20))

    def test_pick_is_a_stored_id(self, store: CoasterStore):
        ids = {store.insert(Coaster(name=str(n))) for n in range(5)}

        for _ in range(50):
            assert store.random_id() in ids

    def test_seeded_rng_is_reproducible(self):
        def picks(seed):
            store = CoasterStore(rng=random.Random(seed))
            for n in range(5):
                store.insert(Coaster(name=str(n)))
            return [store.random_id() for _ in range(10)]

        assert picks(99) == picks(99)
