"""Unit tests for dual-layer conformance validation and fixture loading."""
import pytest

from registry_gate.conformance import (
    load_fixtures,
    load_scenarios,
    validate_payload,
)


def _record(**overrides):
    payload = {
        "owner": {"username": "alice", "email": "alice@example.com"},
        "status": "active",
    }
    payload.update(overrides)
    return payload


class TestValidatePayload:
    def test_valid_record(self):
        result = validate_payload(_record(name="acme"), "RegistryRecord")
        assert result.valid
        assert result.kind == "RegistryRecord"
        assert result.model_violations == ()
        assert result.schema_violations == ()

    def test_both_layers_reject_missing_owner(self):
        payload = _record()
        del payload["owner"]
        result = validate_payload(payload, "RegistryRecord")
        assert not result.valid
        assert [v.field for v in result.model_violations] == ["owner"]
        assert [v.validator for v in result.schema_violations] == ["required"]

    def test_schema_path_points_at_list_item(self):
        result = validate_payload(_record(maintainers=["ok", "not ok"]), "RegistryRecord")
        assert not result.valid
        assert [v.json_path for v in result.schema_violations] == ["$.maintainers[1]"]

    def test_result_verdict_consistency_is_model_only(self):
        payload = {"isValid": False, "errors": [], "report": ""}
        result = validate_payload(payload, "ValidationResult")
        assert not result.valid
        assert result.model_violations
        assert result.schema_violations == ()

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown contract kind"):
            validate_payload({}, "Nope")


class TestFixtureLoading:
    def test_categories(self):
        assert load_fixtures("records")
        assert load_fixtures("results")
        assert all(case.kind == "ProposalScenario" for case in load_fixtures("proposals"))

    def test_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown fixture category"):
            load_fixtures("events")

    def test_scenarios_build_engine_inputs(self):
        scenarios = {s.id: s for s in load_scenarios()}
        scenario = scenarios["proposal-add-own-record"]
        assert scenario.expected_valid
        assert scenario.context.changed_files
        assert len(scenario.snapshot()) == len(scenario.snapshot_files)
