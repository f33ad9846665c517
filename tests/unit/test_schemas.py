"""Unit tests for committed JSON Schema artifacts."""
import json

import pytest

from registry_gate import schemas
from registry_gate.models import ErrorCode, Severity
from registry_gate.record import KEY_PATTERN, RecordStatus
from registry_gate.schemas import (
    SCHEMA_FOR_KIND,
    list_schemas,
    load_schema,
    schema_for_kind,
    schema_path,
)


class TestSchemaLoading:
    def test_list_schemas(self):
        assert list_schemas() == ["record", "validation_result"]

    def test_schema_path(self):
        assert schema_path("record").name == "record.schema.json"

    def test_unknown_schema_names_known_ones(self):
        with pytest.raises(FileNotFoundError, match="Known schemas: record, validation_result"):
            load_schema("event")

    @pytest.mark.parametrize("name", ["record", "validation_result"])
    def test_id_matches_name(self, name):
        assert load_schema(name)["$id"] == f"registry-gate/{name}"

    def test_mismatched_id_rejected(self, tmp_path, monkeypatch):
        (tmp_path / "record.schema.json").write_text(json.dumps({"$id": "registry-gate/other"}))
        monkeypatch.setattr(schemas, "_SCHEMA_DIR", tmp_path)
        with pytest.raises(ValueError, match="expected 'registry-gate/record'"):
            load_schema("record")


class TestSchemaForKind:
    def test_record_kind(self):
        assert schema_for_kind("RegistryRecord") == load_schema("record")

    def test_result_kind(self):
        assert schema_for_kind("ValidationResult") == load_schema("validation_result")

    def test_every_committed_schema_has_a_kind(self):
        assert sorted(SCHEMA_FOR_KIND.values()) == list_schemas()

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Known kinds"):
            schema_for_kind("ProposalScenario")


class TestSchemasMatchModels:
    """The committed schemas are hand-maintained; keep them in step with the models."""

    def test_record_status_enum(self):
        schema = load_schema("record")
        assert schema["properties"]["status"]["enum"] == [s.value for s in RecordStatus]

    def test_record_key_pattern(self):
        schema = load_schema("record")
        assert schema["properties"]["name"]["pattern"] == KEY_PATTERN
        assert schema["properties"]["parent"]["pattern"] == KEY_PATTERN

    def test_error_codes(self):
        item = load_schema("validation_result")["properties"]["errors"]["items"]
        assert item["properties"]["code"]["enum"] == [c.value for c in ErrorCode]
        assert item["properties"]["severity"]["enum"] == [s.value for s in Severity]
