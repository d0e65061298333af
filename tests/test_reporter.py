"""Tests for JSON and console reporters."""

import json

from rich.console import Console

from shellaudit.engine import analyze
from shellaudit.policy.rule_registry import default_registry
from shellaudit.reporter.console_out import print_result, print_rules
from shellaudit.reporter.json_out import to_canonical_json, write_result

SCRIPT = 'chmod 777 /srv\nPASSWORD="hunter2"\n'


class TestCanonicalJson:
    """Deterministic JSON output."""

    def test_sorted_keys_and_trailing_newline(self):
        """Keys sorted, 2-space indent, trailing newline."""
        text = to_canonical_json({"b": 1, "a": 2})
        assert text == '{\n  "a": 2,\n  "b": 1\n}\n'

    def test_model_uses_public_keys(self):
        """Models serialize with camelCase keys."""
        data = json.loads(to_canonical_json(analyze(SCRIPT, script_name="x.sh")))
        assert data["scriptName"] == "x.sh"
        assert "script_name" not in data

    def test_write_result(self, tmp_path):
        """Report is written, parents created, no temp file left."""
        out = tmp_path / "reports" / "x.json"
        result = analyze(SCRIPT)
        assert write_result(result, out) == out
        assert out.read_text(encoding="utf-8") == to_canonical_json(result)
        assert [p.name for p in out.parent.iterdir()] == ["x.json"]

    def test_write_result_replaces_existing(self, tmp_path):
        """An existing report is overwritten."""
        out = tmp_path / "x.json"
        out.write_text("stale", encoding="utf-8")
        write_result(analyze("ls\n"), str(out))
        assert json.loads(out.read_text(encoding="utf-8"))["findings"] == []


class TestConsole:
    """rich console rendering."""

    def _console(self) -> Console:
        return Console(record=True, width=160)

    def test_result_table(self):
        """Findings table shows score and rule ids."""
        out = self._console()
        print_result(analyze(SCRIPT, script_name="x.sh"), out=out, verbose=True)
        text = out.export_text()
        assert "x.sh" in text
        assert "Risk score: 28/100" in text
        assert "PERM001" in text
        assert "CRED001" in text

    def test_no_findings(self):
        """Clean result says so."""
        out = self._console()
        print_result(analyze("ls\n"), out=out)
        assert "No findings" in out.export_text()

    def test_rules_table(self):
        """Rules table lists rule ids."""
        out = self._console()
        print_rules(default_registry(), out=out)
        assert "RCE001" in out.export_text()
