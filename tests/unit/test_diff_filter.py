"""Unit tests for the diff filter."""
from registry_gate.config import GateConfig
from registry_gate.diff_filter import filter_changed_files
from registry_gate.models import ChangedFile, ChangeKind


def _file(path, kind="modified", previous=None):
    return ChangedFile(path=path, change_kind=kind, new_content="{}", previous_path=previous)


class TestFilterChangedFiles:
    def test_ignores_files_outside_registry(self, config):
        files = [
            _file("README.md"),
            _file(".github/workflows/validate-pr.yml"),
            _file("whois/sub/acme.json"),
            _file("whois/acme.txt"),
        ]
        assert filter_changed_files(files, config) == ()

    def test_keeps_registry_records_sorted_by_path(self, config):
        files = [_file("whois/zeta.json"), _file("README.md"), _file("whois/acme.json", "added")]
        result = filter_changed_files(files, config)
        assert [f.path for f in result] == ["whois/acme.json", "whois/zeta.json"]

    def test_rename_within_registry_is_kept(self, config):
        file = _file("whois/new.json", "renamed", "whois/old.json")
        assert filter_changed_files([file], config) == (file,)

    def test_rename_into_registry_becomes_addition(self, config):
        file = _file("whois/acme.json", "renamed", "drafts/acme.json")
        (result,) = filter_changed_files([file], config)
        assert result.change_kind is ChangeKind.ADDED
        assert result.previous_path is None
        assert result.new_content == "{}"

    def test_rename_out_of_registry_becomes_removal(self, config):
        file = _file("archive/acme.json", "renamed", "whois/acme.json")
        (result,) = filter_changed_files([file], config)
        assert result.path == "whois/acme.json"
        assert result.change_kind is ChangeKind.REMOVED
        assert result.new_content is None

    def test_rename_outside_registry_is_ignored(self, config):
        file = _file("docs/b.md", "renamed", "docs/a.md")
        assert filter_changed_files([file], config) == ()

    def test_order_independent(self, config):
        files = [_file("whois/b.json"), _file("whois/a.json"), _file("whois/c.json", "removed")]
        assert filter_changed_files(files, config) == filter_changed_files(
            list(reversed(files)), config
        )

    def test_custom_registry_dir(self):
        config = GateConfig(registry_dir="records")
        files = [_file("records/acme.json"), _file("whois/acme.json")]
        assert [f.path for f in filter_changed_files(files, config)] == ["records/acme.json"]
