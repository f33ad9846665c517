"""Unit tests for the registry record schema and path helpers."""
import pytest
from pydantic import ValidationError as PydanticValidationError

from registry_gate.config import GateConfig
from registry_gate.record import (
    PriorRecord,
    RecordStatus,
    RegistryRecord,
    declared_key,
    is_registry_path,
    is_valid_key,
    normalize_identity,
    path_key,
)


def _payload(**overrides):
    payload = {
        "owner": {"username": "alice", "email": "alice@example.com"},
        "status": "active",
    }
    payload.update(overrides)
    return payload


class TestRegistryRecord:
    def test_minimal_record(self):
        record = RegistryRecord.model_validate(_payload())
        assert record.owner.username == "alice"
        assert record.status is RecordStatus.ACTIVE
        assert record.maintainers == []
        assert record.unknown_fields == ()

    def test_full_record(self):
        record = RegistryRecord.model_validate(_payload(
            name="acme",
            maintainers=["bob", "carol-2"],
            description="Acme Corporation",
            nameservers=["ns1.acme.example.org", "ns2.acme.example.org."],
            parent="corp",
        ))
        assert record.name == "acme"
        assert record.parent == "corp"

    def test_unknown_fields_are_kept_sorted(self):
        record = RegistryRecord.model_validate(_payload(zeta=1, alpha=2))
        assert record.unknown_fields == ("alpha", "zeta")

    @pytest.mark.parametrize("field", ["owner", "status"])
    def test_required_fields(self, field):
        payload = _payload()
        del payload[field]
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(payload)

    def test_owner_rejects_extra_field(self):
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(_payload(
                owner={"username": "alice", "email": "alice@example.com", "phone": "1"}
            ))

    @pytest.mark.parametrize("login", ["-alice", "alice-", "al ice", "a" * 40])
    def test_invalid_owner_login(self, login):
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(_payload(
                owner={"username": login, "email": "x@example.com"}
            ))

    def test_too_many_maintainers(self):
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(_payload(maintainers=[f"m{i}" for i in range(11)]))

    def test_description_length(self):
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(_payload(description="x" * 281))

    def test_invalid_nameserver(self):
        with pytest.raises(PydanticValidationError):
            RegistryRecord.model_validate(_payload(nameservers=["localhost"]))


class TestKeys:
    @pytest.mark.parametrize("key", ["a", "acme", "acme-corp", "x1", "a" * 63])
    def test_valid_keys(self, key):
        assert is_valid_key(key)

    @pytest.mark.parametrize(
        "key", ["", "Acme", "-acme", "acme-", "acme_corp", "a.b", "a" * 64, "acme\n"]
    )
    def test_invalid_keys(self, key):
        assert not is_valid_key(key)

    def test_path_key(self):
        assert path_key("whois/acme.json") == "acme"

    def test_declared_key_prefers_name(self):
        assert declared_key("whois/acme.json", {"name": "other"}) == "other"
        assert declared_key("whois/acme.json", {"name": ""}) == "acme"
        assert declared_key("whois/acme.json", {}) == "acme"


class TestIsRegistryPath:
    @pytest.mark.parametrize("path,expected", [
        ("whois/acme.json", True),
        ("whois/nested/acme.json", False),
        ("whois/acme.txt", False),
        ("whois/.json", False),
        ("README.md", False),
        ("other/acme.json", False),
        ("", False),
        (None, False),
    ])
    def test_default_config(self, path, expected):
        assert is_registry_path(path, GateConfig()) is expected

    def test_custom_directory(self):
        config = GateConfig(registry_dir="data/records")
        assert is_registry_path("data/records/acme.json", config)
        assert not is_registry_path("whois/acme.json", config)


class TestPriorRecord:
    def test_identities_are_normalized(self):
        prior = PriorRecord.from_payload("whois/acme.json", _payload(
            owner={"username": " Alice ", "email": "a@example.com"},
            maintainers=["Bob", "", 3],
        ))
        assert prior.owner == "alice"
        assert prior.maintainers == frozenset({"bob"})
        assert prior.key == "acme"

    def test_lenient_on_broken_owner(self):
        prior = PriorRecord.from_payload("whois/acme.json", {"owner": "alice", "parent": 5})
        assert prior.owner is None
        assert prior.parent is None
        assert prior.maintainers == frozenset()

    def test_key_from_name(self):
        prior = PriorRecord.from_payload("whois/acme.json", _payload(name="acme-corp"))
        assert prior.key == "acme-corp"


def test_normalize_identity():
    assert normalize_identity("  AlIcE ") == "alice"
