"""Tests for the YAML datastore."""

import pytest
from structlog.testing import capture_logs

from recipe_datastore import Datastore, DatastoreKeyError


@pytest.fixture
def datastore(data_dir):
    return Datastore(data_dir / "db")


class TestDatastore:

    def test_dotted_key_path(self, datastore):
        assert datastore.get("eggs.meta.density") == 1.03
        assert datastore.get("eggs.meta.storage.shelf life") == 30
        assert datastore.get("eggs.meta.storage.fridge life") == 60

    def test_slash_key_path(self, datastore):
        assert datastore.get("eggs/meta/storage.shelf life") == 30
        assert datastore.get("prices/pantry/eggs") == 0.25

    def test_whole_document(self, datastore):
        assert datastore.get("eggs/meta/")["density"] == 1.03

    @pytest.mark.parametrize("key_path", [
        "nonexistent.key.path",
        "eggs.meta.colour",
        "eggs.meta.density.value",
        "/density",
        "",
    ])
    def test_missing_keys_raise(self, datastore, key_path):
        with pytest.raises(DatastoreKeyError):
            datastore.get(key_path)

    def test_lookup_logs_and_returns_empty(self, datastore):
        with capture_logs() as logs:
            assert datastore.lookup("nonexistent.key.path") == ""
        assert logs[0]["event"] == "Datastore lookup failed"
        assert logs[0]["key_path"] == "nonexistent.key.path"

    def test_yaml_extension(self, tmp_path):
        (tmp_path / "spices.yaml").write_text("salt:\n  price: 0.5\n")
        assert Datastore(tmp_path).get("spices.salt.price") == 0.5
