"""Unit tests for RegistrySnapshot."""
import json
import logging

import pytest

from registry_gate.config import GateConfig
from registry_gate.models import SnapshotError
from registry_gate.snapshot import RegistrySnapshot


def _record(owner, **fields):
    payload = {"owner": {"username": owner, "email": f"{owner}@example.com"}, "status": "active"}
    payload.update(fields)
    return json.dumps(payload)


class TestRegistrySnapshot:
    def test_keeps_only_registry_paths(self):
        snapshot = RegistrySnapshot({
            "whois/acme.json": _record("alice"),
            "README.md": "# registry",
            "whois/nested/x.json": _record("bob"),
        })
        assert snapshot.paths == ("whois/acme.json",)
        assert len(snapshot) == 1
        assert "whois/acme.json" in snapshot
        assert "README.md" not in snapshot

    def test_prior_projection(self, acme_snapshot):
        prior = acme_snapshot.prior("whois/acme.json")
        assert prior.owner == "alice"
        assert prior.maintainers == frozenset({"carol"})
        assert prior.key == "acme"
        assert acme_snapshot.prior("whois/ghost.json") is None

    def test_prior_is_cached(self, acme_snapshot):
        assert acme_snapshot.prior("whois/acme.json") is acme_snapshot.prior("whois/acme.json")

    def test_unreadable_record_raises(self):
        snapshot = RegistrySnapshot({"whois/acme.json": "[1, 2]"})
        with pytest.raises(SnapshotError, match="whois/acme.json"):
            snapshot.prior("whois/acme.json")

    def test_key_index(self, acme_snapshot):
        assert acme_snapshot.key_index() == {
            "acme": "whois/acme.json",
            "globex": "whois/globex.json",
        }

    def test_existing_collision_keeps_first_path(self, caplog):
        snapshot = RegistrySnapshot({
            "whois/b.json": _record("bob", name="a"),
            "whois/a.json": _record("alice"),
        })
        with caplog.at_level(logging.WARNING, logger="registry_gate.snapshot"):
            index = snapshot.key_index()
        assert index == {"a": "whois/a.json"}
        assert "share key" in caplog.text


class TestFromDirectory:
    def test_loads_records(self, tmp_path):
        registry = tmp_path / "whois"
        registry.mkdir()
        (registry / "acme.json").write_text(_record("alice"), encoding="utf-8")
        (registry / "notes.txt").write_text("ignored", encoding="utf-8")
        (tmp_path / "README.md").write_text("ignored", encoding="utf-8")

        snapshot = RegistrySnapshot.from_directory(tmp_path)
        assert snapshot.paths == ("whois/acme.json",)
        assert snapshot.prior("whois/acme.json").owner == "alice"

    def test_missing_directory_is_empty(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING, logger="registry_gate.snapshot"):
            snapshot = RegistrySnapshot.from_directory(tmp_path)
        assert len(snapshot) == 0
        assert "does not exist" in caplog.text

    def test_custom_directory(self, tmp_path):
        registry = tmp_path / "records"
        registry.mkdir()
        (registry / "acme.json").write_text(_record("alice"), encoding="utf-8")
        config = GateConfig(registry_dir="records")
        snapshot = RegistrySnapshot.from_directory(tmp_path, config)
        assert snapshot.paths == ("records/acme.json",)

    def test_undecodable_file_raises(self, tmp_path):
        registry = tmp_path / "whois"
        registry.mkdir()
        (registry / "acme.json").write_bytes(b"\xff\xfe\x00")
        with pytest.raises(SnapshotError, match="Cannot read"):
            RegistrySnapshot.from_directory(tmp_path)
