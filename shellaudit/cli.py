# shellaudit — Shell Script Security Analysis Service
# Copyright (C) 2026 shellaudit Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""shellaudit CLI — Typer entry point.

Commands:
- shellaudit serve            — Run the HTTP analysis service
- shellaudit analyze <file>   — Analyze a local script (table or --json)
- shellaudit rules            — Show the active rule catalog
- shellaudit token            — Mint a bearer token for the service
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from shellaudit import __version__
from shellaudit.config import ServiceConfig, load_config
from shellaudit.crypto.tokens import DEFAULT_TTL_SECONDS, issue_token
from shellaudit.engine import analyze as analyze_content
from shellaudit.errors import ConfigError, LoadError
from shellaudit.models.severity import Severity
from shellaudit.policy.rule_registry import RuleRegistry, build_registry
from shellaudit.reporter.console_out import console, print_result, print_rules
from shellaudit.reporter.json_out import to_canonical_json, write_result
from shellaudit.store.script_registry import ScriptRegistry, load_script

app = typer.Typer(
    name="shellaudit",
    help=(
        "shellaudit: static security analysis for shell scripts. "
        "Run 'shellaudit <command> --help' for flags."
    ),
    add_completion=False,
)

logger = logging.getLogger("shellaudit")


def _setup_logging(level: str | int) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Suppress noisy third-party logs
    for _name in ("uvicorn.access", "httpx", "httpcore"):
        logging.getLogger(_name).setLevel(logging.WARNING)


def _load_config_or_exit(config_path: Optional[Path]) -> ServiceConfig:
    try:
        return load_config(config_path)
    except ConfigError as e:
        logger.error("%s", e)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def _build_rules_or_exit(rules_path: Optional[str]) -> RuleRegistry:
    try:
        return build_registry(rules_path)
    except ConfigError as e:
        logger.error("%s", e)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def serve(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.json (default: $SHELLAUDIT_CONFIG or ./config.json)"
    ),
) -> None:
    """Load scripts and rules, then serve the HTTP API."""
    import uvicorn

    from shellaudit.api import create_app

    config = _load_config_or_exit(config_path)
    _setup_logging(config.log_level)

    rules = _build_rules_or_exit(config.rules_file)
    registry = ScriptRegistry(config.script_dir)
    try:
        registry.load()
    except LoadError as e:
        logger.error("%s", e)
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    logger.info(
        "Serving %d scripts with %d rules on %s:%d",
        len(registry), len(rules), config.bind_address, config.bind_port,
    )
    uvicorn.run(
        create_app(config, registry, rules),
        host=config.bind_address,
        port=config.bind_port,
        log_level=config.log_level.lower(),
    )


@app.command()
def analyze(
    path: Path = typer.Argument(..., help="Shell script to analyze"),
    output_json: bool = typer.Option(False, "--json", help="Output canonical JSON to stdout (for CI)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also save the JSON report to this file"),
    rules_path: Optional[str] = typer.Option(None, "--rules", help="Extra YAML rules appended to the built-in catalog"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show remediation and debug logs"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress all output except errors"),
) -> None:
    """Analyze a local script. Exits 1 when any CRITICAL finding is present."""
    if quiet:
        _setup_logging(logging.ERROR)
    elif verbose:
        _setup_logging(logging.DEBUG)
    else:
        _setup_logging(logging.WARNING)

    rules = _build_rules_or_exit(rules_path)
    try:
        script = load_script(path)
    except LoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    result = analyze_content(script.content, rules, script_name=script.filename)

    if output_json:
        typer.echo(to_canonical_json(result), nl=False)
    elif not quiet:
        print_result(result, verbose=verbose)

    if output is not None:
        try:
            saved = write_result(result, output)
        except OSError as e:
            console.print(f"[red]Error: could not write report to {output}: {e}[/red]")
            raise typer.Exit(code=1)
        if not output_json and not quiet:
            console.print(f"[dim]Report saved to {saved}[/dim]")

    if result.summary_counts.get(Severity.CRITICAL, 0):
        raise typer.Exit(code=1)


@app.command()
def rules(
    rules_path: Optional[str] = typer.Option(None, "--rules", help="Extra YAML rules appended to the built-in catalog"),
) -> None:
    """Show the active rule catalog."""
    print_rules(_build_rules_or_exit(rules_path))


@app.command()
def token(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.json (default: $SHELLAUDIT_CONFIG or ./config.json)"
    ),
    subject: str = typer.Option("shellaudit", "--subject", help="Token subject (sub claim)"),
    ttl: int = typer.Option(DEFAULT_TTL_SECONDS, "--ttl", min=1, help="Lifetime in seconds"),
) -> None:
    """Mint a bearer token signed with the configured secret."""
    config = _load_config_or_exit(config_path)
    typer.echo(issue_token(config.signing_secret, subject=subject, ttl_seconds=ttl))


@app.command()
def version() -> None:
    """Show the shellaudit version."""
    console.print(f"shellaudit v{__version__}")


if __name__ == "__main__":
    app()
