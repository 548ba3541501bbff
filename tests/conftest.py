"""Shared fixtures for storelens tests."""

import json
import logging

import pytest

from storelens.core.store import InMemoryRecordStore
from storelens.utils.config import Config, set_config


@pytest.fixture(autouse=True)
def default_config():
    """Run every test against default configuration."""
    set_config(Config())
    yield
    set_config(None)

    # CLI runs install handlers bound to captured streams
    root = logging.getLogger("storelens")
    root.handlers.clear()
    root.propagate = True


@pytest.fixture
def users():
    return [
        {"id": "1", "email": "a@x.com"},
        {"id": "2", "email": "b@x.com"},
    ]


@pytest.fixture
def orders():
    return [
        {"id": "10", "userId": "1", "total": 12.5},
        {"id": "11", "userId": "2", "total": 30},
    ]


@pytest.fixture
def shop_store(users, orders):
    """Store with users and orders linked through orders.userId."""
    return InMemoryRecordStore.from_tables({"users": users, "orders": orders})


@pytest.fixture
def unrelated_store():
    """Two tables with no naming or value relationship."""
    return InMemoryRecordStore.from_tables(
        {
            "colors": [
                {"name": "red", "hex": "#f00"},
                {"name": "blue", "hex": "#00f"},
            ],
            "animals": [
                {"species": "cat", "sound": "meow"},
                {"species": "dog", "sound": "woof"},
            ],
        }
    )


@pytest.fixture
def weak_link_store():
    """Tables whose links all score below perfect confidence.

    ``orders.fk_thing`` points at ``accounts.user_id`` (no name match, no
    primary key in accounts) and ``accounts.user_id`` points at
    ``orders.id`` (primary key but no name match and no overlap).
    """
    return InMemoryRecordStore.from_tables(
        {
            "orders": [
                {"id": "o1", "fk_thing": "zz"},
                {"id": "o2", "fk_thing": "yy"},
            ],
            "accounts": [{"user_id": "x1"}, {"user_id": "x1"}],
        }
    )


@pytest.fixture
def json_source(tmp_path, users, orders):
    """Single JSON file holding a whole store."""
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"users": users, "orders": orders}))
    return path


@pytest.fixture
def csv_source(tmp_path):
    """Directory of CSV files, one table each."""
    data_dir = tmp_path / "csv"
    data_dir.mkdir()
    (data_dir / "users.csv").write_text("id,email\n1,a@x.com\n2,b@x.com\n")
    (data_dir / "orders.csv").write_text(
        "id,user_id,total\n10,1,5.0\n11,2,\n12,1,7.5\n"
    )
    return data_dir
