"""Tests for JSON and CSV connectors."""

import json

import pytest

from storelens.connectors import (
    BaseConnector,
    ConnectorFactory,
    CSVLoader,
    JSONLoader,
    load_into_store,
)
from storelens.core.facade import AnalysisFacade
from storelens.core.store import InMemoryRecordStore


def test_json_file(json_source):
    loader = JSONLoader(json_source)

    assert sorted(loader.get_table_names()) == ["orders", "users"]
    tables = loader.load_tables()
    assert tables["users"][0] == {"id": "1", "email": "a@x.com"}


def test_json_directory(tmp_path):
    (tmp_path / "users.json").write_text(json.dumps([{"id": 1}]))
    (tmp_path / "settings.json").write_text(json.dumps({"theme": "dark"}))

    loader = JSONLoader(tmp_path)
    assert loader.get_table_names() == ["settings", "users"]
    assert loader.load_tables()["settings"] == {"theme": "dark"}


def test_json_file_must_be_object(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2]")

    with pytest.raises(ValueError):
        JSONLoader(path).load_tables()


def test_json_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        JSONLoader(tmp_path / "nope.json")


def test_csv_directory(csv_source):
    loader = CSVLoader(csv_source)

    assert loader.get_table_names() == ["orders", "users"]
    orders = loader.load_tables()["orders"]
    assert orders[1] == {"id": 11, "user_id": 2, "total": None}
    assert orders[0]["total"] == 5.0


def test_csv_empty_directory(tmp_path):
    with pytest.raises(ValueError):
        CSVLoader(tmp_path).load_tables()


def test_factory_detects_source_type(json_source, csv_source):
    assert isinstance(ConnectorFactory.from_path(json_source), JSONLoader)
    assert isinstance(ConnectorFactory.from_path(csv_source), CSVLoader)
    assert isinstance(ConnectorFactory.from_path(csv_source, "json"), JSONLoader)


def test_factory_unknown_type():
    with pytest.raises(ValueError):
        ConnectorFactory.create_connector("parquet", path=".")


def test_register_connector():
    class StaticConnector(BaseConnector):
        def load_tables(self):
            return {"static": [{"id": 1}]}

        def get_table_names(self):
            return ["static"]

    ConnectorFactory.register_connector("static", StaticConnector)
    assert "static" in ConnectorFactory.list_connectors()

    with pytest.raises(TypeError):
        ConnectorFactory.register_connector("bad", dict)


def test_load_into_store_and_analyze(csv_source):
    store = InMemoryRecordStore()
    names = load_into_store(CSVLoader(csv_source), store)

    assert names == ["orders", "users"]
    assert store.get_record_count("orders") == 3

    relationships = AnalysisFacade(store).analyze_all_tables().relationships
    assert [r.id for r in relationships] == ["orders.user_id->users.id"]
