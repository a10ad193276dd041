"""Tests for the in-memory vector store."""

import threading

import pytest

from proverbs.storage import InMemoryVectorStore, SAMPLE_PROVERBS, VectorStore, seed_store
from proverbs.shared.exceptions import StoreError


class TestVectorStoreInterface:
    def test_is_abstract_class(self):
        with pytest.raises(TypeError):
            VectorStore()

    def test_inmemory_implements_interface(self):
        assert isinstance(InMemoryVectorStore(), VectorStore)


class TestUpsert:
    def test_insert_assigns_id(self, store):
        item = store.upsert_by_key(1, 1, "X")
        assert item.id == 1
        assert item.key == (1, 1)
        assert item.vector is None
        assert item.created_at is not None

    def test_upsert_on_conflict(self, store):
        """Same (chapter, verse) twice leaves exactly one item with the new text"""
        first = store.upsert_by_key(1, 1, "X")
        second = store.upsert_by_key(1, 1, "Y")

        assert second.id == first.id
        items = store.list_by_group(1)
        assert len(items) == 1
        assert items[0].text == "Y"

    def test_same_text_keeps_vector(self, store, vec):
        store.upsert_by_key(1, 1, "X", vec(0))
        item = store.upsert_by_key(1, 1, "X")
        assert item.vector == vec(0)

    def test_changed_text_keeps_vector(self, store, vec):
        """Overwriting the text without a vector leaves the stored vector alone"""
        store.upsert_by_key(1, 1, "X", vec(0))
        item = store.upsert_by_key(1, 1, "Y")
        assert item.text == "Y"
        assert item.vector == vec(0)

    def test_new_vector_replaces(self, store, vec):
        store.upsert_by_key(1, 1, "X", vec(0))
        item = store.upsert_by_key(1, 1, "Y", vec(1))
        assert item.vector == vec(1)

    def test_returned_items_are_copies(self, store, vec):
        item = store.upsert_by_key(1, 1, "X", vec(0))
        item.text = "mutated"
        item.vector[0] = 99.0
        stored = store.get_by_id(item.id)
        assert stored.text == "X"
        assert stored.vector == vec(0)


class TestQueries:
    @pytest.fixture
    def seeded(self, store):
        seed_store(store)
        return store

    def test_seed(self, seeded):
        assert seeded.stats().items == len(SAMPLE_PROVERBS)
        assert seeded.stats().embedded == 0

    def test_list_ordering(self, seeded):
        keys = [item.key for item in seeded.list_by_group()]
        assert keys == sorted(keys)
        assert [item.ordinal for item in seeded.list_by_group(1)] == [1, 2, 3, 7]

    def test_list_groups(self, seeded):
        assert seeded.list_groups() == [1, 3, 4, 16, 22, 27]

    def test_search_case_insensitive(self, seeded):
        results = seeded.search_text_like("WISDOM", 20)
        assert [r.key for r in results] == [(1, 2), (1, 3), (1, 7), (4, 7)]

    def test_search_limit(self, seeded):
        assert len(seeded.search_text_like("the", 2)) == 2

    def test_search_literal_wildcards(self, store):
        store.upsert_by_key(1, 1, "100% sure")
        store.upsert_by_key(1, 2, "1000 sure")
        assert [r.ordinal for r in store.search_text_like("0%", 10)] == [1]

    def test_missing_vectors(self, store, vec):
        store.upsert_by_key(1, 1, "a", vec(0))
        store.upsert_by_key(1, 2, "b")
        store.upsert_by_key(2, 1, "c")
        assert [i.key for i in store.list_missing_vectors()] == [(1, 2), (2, 1)]
        assert [i.key for i in store.list_missing_vectors(2)] == [(2, 1)]


class TestKNearest:
    def test_orders_by_distance(self, store):
        """Distances 0.1, 0.3, 0.05 come back as (third, first, second)"""
        # cos(theta) = 1 - d; vectors in the plane of the query [1, 0]
        def at_distance(d):
            c = 1.0 - d
            return [c, (1.0 - c * c) ** 0.5]

        first = store.upsert_by_key(1, 1, "first", at_distance(0.1))
        second = store.upsert_by_key(1, 2, "second", at_distance(0.3))
        third = store.upsert_by_key(1, 3, "third", at_distance(0.05))

        results = store.k_nearest([1.0, 0.0], 3)

        assert [item.id for item, _ in results] == [third.id, first.id, second.id]
        assert [d for _, d in results] == pytest.approx([0.05, 0.1, 0.3])

    def test_skips_items_without_vector(self, store, vec):
        store.upsert_by_key(1, 1, "embedded", vec(0))
        store.upsert_by_key(1, 2, "not embedded")
        results = store.k_nearest(vec(0), 10)
        assert [item.text for item, _ in results] == ["embedded"]

    def test_k_limits_results(self, store, vec):
        for i in range(5):
            store.upsert_by_key(1, i + 1, f"v{i}", vec(i))
        assert len(store.k_nearest(vec(0), 2)) == 2


class TestUpdateDelete:
    def test_partial_update(self, store, vec):
        item = store.upsert_by_key(1, 1, "X", vec(0))
        updated = store.update_item(item.id, ordinal=2)
        assert updated.key == (1, 2)
        assert updated.vector == vec(0)
        assert store.upsert_by_key(1, 1, "new").id != item.id

    def test_text_change_keeps_vector(self, store, vec):
        item = store.upsert_by_key(1, 1, "X", vec(0))
        updated = store.update_item(item.id, text="Y")
        assert updated.text == "Y"
        assert updated.vector == vec(0)

    def test_move_onto_occupied_key(self, store):
        store.upsert_by_key(1, 1, "X")
        other = store.upsert_by_key(1, 2, "Y")
        with pytest.raises(StoreError):
            store.update_item(other.id, ordinal=1)
        assert store.get_by_id(other.id).ordinal == 2

    def test_update_unknown(self, store):
        assert store.update_item(42, text="nope") is None

    def test_delete(self, store):
        item = store.upsert_by_key(1, 1, "X")
        assert store.delete_by_id(item.id) is True
        assert store.get_by_id(item.id) is None
        assert store.delete_by_id(item.id) is False
        store.upsert_by_key(1, 1, "X again")


class TestTransaction:
    def test_commit(self, store, vec):
        item = store.upsert_by_key(1, 1, "X")
        with store.transaction() as tx:
            assert tx.set_vector(item.id, vec(1)) is True
        assert store.get_by_id(item.id).vector == vec(1)

    def test_rollback_on_error(self, store, vec):
        a = store.upsert_by_key(1, 1, "a", vec(0))
        b = store.upsert_by_key(1, 2, "b")

        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.set_vector(a.id, vec(3))
                tx.set_vector(b.id, vec(4))
                raise RuntimeError("abort")

        assert store.get_by_id(a.id).vector == vec(0)
        assert store.get_by_id(b.id).vector is None

    def test_unknown_id(self, store, vec):
        with store.transaction() as tx:
            assert tx.set_vector(99, vec(0)) is False


class TestConcurrency:
    def test_parallel_upserts(self, store):
        def write(chapter):
            for verse in range(1, 51):
                store.upsert_by_key(chapter, verse, f"{chapter}:{verse}")

        threads = [threading.Thread(target=write, args=(c,)) for c in range(1, 5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stats = store.stats()
        assert stats.items == 200
        assert stats.groups == 4
        assert len({item.id for item in store.list_by_group()}) == 200
