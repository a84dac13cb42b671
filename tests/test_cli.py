"""Tests for cli.py - command dispatch, exit codes and ledger persistence."""

import json
import re
from unittest.mock import Mock, patch

import pytest

from feature_migration.cli import build_file_lister, main
from feature_migration.config import CONFIG_ENV_VAR
from feature_migration.detector import DirectoryFileLister, FixedFileLister
from feature_migration.store import FeatureStore


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Run the CLI from an empty directory with default configuration."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    return tmp_path


def run_cli(*argv):
    return main(["--state-file", "ledger.json", *argv])


def registered_id(output):
    match = re.search(r"\((feature_\w+)\)", output)
    assert match, output
    return match.group(1)


class TestRegisterAndList:

    def test_register_prints_name_and_id(self, workspace, capsys):
        assert run_cli("register", "Task.create", "Create tasks", "base44Entities.Task.create(") == 0

        out = capsys.readouterr().out
        assert "Registered feature: Task.create" in out
        feature = FeatureStore(str(workspace / "ledger.json")).load()[0]
        assert feature.id == registered_id(out)
        assert feature.base44_usage == ["base44Entities.Task.create("]
        assert feature.status.value == "detected"
        assert feature.priority.value == "medium"

    def test_list_empty(self, workspace, capsys):
        assert run_cli("list") == 0
        assert "No features registered" in capsys.readouterr().out

    def test_list_shows_features(self, workspace, capsys):
        run_cli("register", "Goal.list", "Goals")
        capsys.readouterr()

        assert run_cli("list") == 0

        out = capsys.readouterr().out
        assert "name" in out and "status" in out and "priority" in out and "created" in out
        assert "Goal.list" in out
        assert "detected" in out
        assert re.search(r"\d{4}-\d{2}-\d{2}", out)

    def test_read_only_commands_do_not_write_ledger(self, workspace):
        run_cli("list")
        run_cli("stats")
        assert not (workspace / "ledger.json").exists()


class TestGenerateAndStatus:

    def test_generate_script(self, workspace, capsys):
        run_cli("register", "Task.create", "Create tasks", "base44Entities.Task.create(")
        feature_id = registered_id(capsys.readouterr().out)

        assert run_cli("generate", feature_id) == 0

        out = capsys.readouterr().out
        assert "Generated migration script:" in out
        assert "task.createAPI" in out
        stored = FeatureStore(str(workspace / "ledger.json")).load()[0]
        assert stored.migration_script
        assert "/api/v1/task.create" in stored.rest_endpoints

    def test_generate_without_template(self, workspace, capsys):
        run_cli("register", "Misc", "No usage")
        feature_id = registered_id(capsys.readouterr().out)

        assert run_cli("generate", feature_id) == 0
        assert "No suitable template found" in capsys.readouterr().out

    def test_generate_unknown_id(self, workspace, capsys):
        assert run_cli("generate", "feature_0_missing") == 0
        assert "No suitable template found" in capsys.readouterr().out

    def test_status_then_stats(self, workspace, capsys):
        run_cli("register", "A.get", "a")
        first = registered_id(capsys.readouterr().out)
        run_cli("register", "B.get", "b")
        capsys.readouterr()

        assert run_cli("status", first, "migrated") == 0
        assert run_cli("stats") == 0

        out = capsys.readouterr().out
        assert "Total Features: 2" in out
        assert "Migrated: 1" in out
        assert "In Progress: 0" in out
        assert "Failed: 0" in out
        assert "Pending: 1" in out

    def test_invalid_status_rejected_by_parser(self, workspace):
        with pytest.raises(SystemExit):
            run_cli("status", "feature_0_missing", "done")


class TestScanAndCheck:

    def write(self, workspace, relative, content):
        path = workspace / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def test_check_clean_exits_zero(self, workspace):
        self.write(workspace, "src/app.js", "export default {};\n")
        assert run_cli("check") == 0

    def test_check_dirty_exits_one(self, workspace, capsys):
        self.write(workspace, "src/app.js", "base44Entities.Task.list();\n")

        assert run_cli("check") == 1
        assert "Base44 usage detected" in capsys.readouterr().out

    def test_check_path_override(self, workspace):
        self.write(workspace, "src/app.js", "export default {};\n")
        self.write(workspace, "legacy/old.jsx", "base44Auth.login(c);\n")

        assert run_cli("check", "--path", "legacy") == 1

    def test_scan_registers_and_persists(self, workspace, capsys):
        self.write(workspace, "src/tasks.ts", "base44Entities.Task.update(id, d);\n")

        assert run_cli("scan") == 0

        assert "Auto-registered feature: Task.update" in capsys.readouterr().out
        names = [f.name for f in FeatureStore(str(workspace / "ledger.json")).load()]
        assert names == ["Task.update"]

    def test_fixed_file_list_from_config(self, workspace):
        self.write(workspace, "src/listed.js", "export default {};\n")
        self.write(workspace, "src/unlisted.js", "base44Auth.login(c);\n")
        (workspace / "config.yaml").write_text(
            "scan:\n  files:\n    - src/listed.js\n", encoding="utf-8"
        )

        assert run_cli("check") == 0


class TestLedgerRecovery:

    def test_partly_bad_ledger_survives_register(self, workspace, capsys):
        ledger = workspace / "ledger.json"
        good = {"id": "feature_1_a", "name": "A.get", "description": "a"}
        bad_status = {"id": "feature_1_b", "name": "B.get", "description": "b", "status": "done"}
        ledger.write_text(json.dumps([good, bad_status, {"description": "no name"}]), encoding="utf-8")

        assert run_cli("register", "C.get", "c") == 0

        ids = [f.id for f in FeatureStore(str(ledger)).load()]
        assert ids[:2] == ["feature_1_a", "feature_1_b"]
        assert len(ids) == 3
        backup = json.loads((workspace / "ledger.json.bak").read_text(encoding="utf-8"))
        assert len(backup) == 3

    def test_wrong_shape_ledger_is_listed_as_empty(self, workspace, capsys):
        ledger = workspace / "ledger.json"
        ledger.write_text('{"features": []}', encoding="utf-8")

        assert run_cli("list") == 0

        assert "No features registered" in capsys.readouterr().out
        assert (workspace / "ledger.json.bak").exists()


class TestErrorsAndUsage:

    def test_no_command_prints_usage(self, workspace, capsys):
        assert main([]) == 0
        assert "usage:" in capsys.readouterr().out

    def test_missing_config_reports_error(self, workspace, capsys):
        assert main(["--config", "nope.yaml", "list"]) == 1
        assert capsys.readouterr().out.startswith("Error: ")

    def test_unexpected_exception_exits_one(self, workspace, capsys):
        failing = Mock(side_effect=RuntimeError("kaboom"))
        with patch.dict("feature_migration.cli.REGISTRY_COMMANDS", {"stats": failing}):
            assert run_cli("stats") == 1

        assert "Error: kaboom" in capsys.readouterr().out


class TestBuildFileLister:

    def test_files_configured(self):
        lister = build_file_lister({"files": ["a.js"], "extensions": [".js"]})
        assert isinstance(lister, FixedFileLister)

    def test_walk_by_default(self):
        lister = build_file_lister({"files": [], "extensions": [".ts"]})
        assert isinstance(lister, DirectoryFileLister)
        assert lister.extensions == (".ts",)
