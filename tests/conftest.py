import json
import os

import pytest
from fastapi.testclient import TestClient

from main import create_app
from todos import TodoStore


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{}\n", encoding="utf-8")
    return path


@pytest.fixture
def stored(data_file):
    """Returns a callable reading the persisted map back from disk."""
    def read():
        with open(data_file, "r", encoding="utf-8") as f:
            return json.load(f)
    return read


@pytest.fixture
def store(data_file):
    return TodoStore.load(str(data_file))


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as c:
        yield c


@pytest.fixture
def clean_env(monkeypatch):
    env = {k: v for k, v in os.environ.items() if k not in ("PORT", "HOST", "TODOS_FILE", "LOG_LEVEL")}
    monkeypatch.setattr(os, "environ", env)
    return env
