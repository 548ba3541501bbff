"""Tests for the in-memory record store."""

import pytest

from storelens.core.store import InMemoryRecordStore, validate_table_name
from storelens.core.types import DataType
from storelens.exceptions import InvalidTableNameError, StoreCapacityError


def test_put_and_get_detach_values():
    store = InMemoryRecordStore()
    records = [{"id": 1}]
    store.put("users", records)
    records[0]["id"] = 99

    assert store.get_table("users") == [{"id": 1}]

    fetched = store.get_table("users")
    fetched.append({"id": 2})
    assert store.get_record_count("users") == 1


def test_record_count():
    store = InMemoryRecordStore.from_tables({"many": [1, 2, 3], "one": {"a": 1}})
    assert store.get_record_count("many") == 3
    assert store.get_record_count("one") == 1
    assert store.get_record_count("absent") == 0
    assert store.get_table("absent") is None


def test_reserved_keys_are_not_tables():
    store = InMemoryRecordStore(prefix="lsdb_")
    store.put("lsdb_metadata", {})
    store.put("lsdb_schemas", {})
    store.put("users", [])

    assert store.list_table_names() == ["users"]
    assert "lsdb_metadata" not in store


def test_table_names_sorted():
    store = InMemoryRecordStore.from_tables({"b": [], "a": [], "c": []})
    assert store.list_table_names() == ["a", "b", "c"]


def test_capacity_exceeded_leaves_store_unchanged():
    store = InMemoryRecordStore(capacity_bytes=20)
    store.put("small", "x")

    with pytest.raises(StoreCapacityError) as exc_info:
        store.put("big", "x" * 50)

    assert exc_info.value.table_name == "big"
    assert store.list_table_names() == ["small"]


def test_overwrite_counts_replaced_value_as_free():
    store = InMemoryRecordStore(capacity_bytes=30)
    store.put("t", "x" * 20)
    store.put("t", "y" * 25)
    assert store.get_table("t") == "y" * 25


def test_non_json_value_rejected():
    store = InMemoryRecordStore()
    with pytest.raises(ValueError):
        store.put("bad", {1, 2})
    with pytest.raises(ValueError):
        store.put("nan", float("nan"))
    assert len(store) == 0


def test_metadata_and_stats():
    store = InMemoryRecordStore(capacity_bytes=1000)
    store.put("users", [{"id": 1}])

    meta = store.get_metadata("users")
    assert meta.type == DataType.ARRAY
    assert meta.size == len('[{"id": 1}]')

    stats = store.get_storage_stats()
    assert stats.used_keys == 1
    assert stats.total_size == meta.size
    assert stats.available_space == 1000 - meta.size
    assert 0 < stats.used_percent <= 100


def test_delete_and_clear():
    store = InMemoryRecordStore.from_tables({"a": [1], "b": [2]})
    assert store.delete("a") is True
    assert store.delete("a") is False
    store.clear_all_tables()
    assert store.list_table_names() == []
    assert store.get_metadata("b") is None


def test_validate_table_name():
    assert validate_table_name("user_orders-2") == (True, [])
    valid, errors = validate_table_name("bad name!")
    assert not valid and errors
    assert not validate_table_name("")[0]
    assert not validate_table_name("x" * 101)[0]


def test_strict_names():
    store = InMemoryRecordStore(strict_names=True)
    with pytest.raises(InvalidTableNameError):
        store.put("no spaces allowed", [])


def test_schemas_kept_under_reserved_key():
    store = InMemoryRecordStore(prefix="lsdb_")
    store.put("users", [])
    store.save_schemas({"users": {"properties": {}}})

    assert store.load_schemas() == {"users": {"properties": {}}}
    assert store.list_table_names() == ["users"]
    assert store.delete("lsdb_schemas") is False

    store.clear_all_tables()
    assert store.load_schemas() == {"users": {"properties": {}}}

    store.save_schemas({})
    assert store.load_schemas() == {}
    assert store.get_table("lsdb_schemas") is None


def test_malformed_schema_key_is_ignored():
    store = InMemoryRecordStore(prefix="lsdb_")
    store.put("lsdb_schemas", ["not", "a", "mapping"])
    assert store.load_schemas() == {}
