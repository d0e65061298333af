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

"""Rule registry: the ordered, read-only set of detection rules.

The built-in catalog lives in ``shellaudit/rules/shell_rules.yaml`` and is
loaded once per process. Extra rule files are appended with
:meth:`RuleRegistry.extend`, which returns a new registry; an existing
registry never changes, so it can be shared across threads without locking.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, Optional

import yaml
from pydantic import ValidationError

from shellaudit.errors import ConfigError
from shellaudit.models.rules import Rule

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent.parent / "rules" / "shell_rules.yaml"


class RuleRegistry:
    """Ordered, immutable sequence of rules."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)
        seen: set[str] = set()
        for rule in self._rules:
            if rule.id in seen:
                raise ConfigError(f"Duplicate rule id: {rule.id}")
            seen.add(rule.id)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry(rules={len(self._rules)})"

    def get(self, rule_id: str) -> Optional[Rule]:
        """Return the rule with ``rule_id``, or None."""
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def extend(self, rules: Iterable[Rule]) -> RuleRegistry:
        """Return a new registry with ``rules`` appended after the current ones."""
        return RuleRegistry(self._rules + tuple(rules))


def load_rules(rules_path: str | Path) -> list[Rule]:
    """Load rules from a YAML file of the form ``{rules: [...]}``.

    Raises:
        ConfigError: the file is unreadable, is not valid YAML, or a rule
            does not match the schema.
    """
    path = Path(rules_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read rules file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in rules file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        raise ConfigError(f"Rules file {path} must contain a top-level 'rules' list")

    rules = []
    for index, rule_data in enumerate(data["rules"]):
        if not isinstance(rule_data, dict):
            raise ConfigError(f"Rule #{index} in {path} is not a mapping")
        try:
            rules.append(Rule(**rule_data))
        except ValidationError as e:
            rule_id = rule_data.get("id", f"#{index}")
            raise ConfigError(f"Invalid rule {rule_id} in {path}: {e}") from e

    logger.debug("Loaded %d rules from %s", len(rules), path)
    return rules


@lru_cache(maxsize=1)
def default_registry() -> RuleRegistry:
    """The built-in rule catalog, loaded once per process."""
    return RuleRegistry(load_rules(DEFAULT_RULES_PATH))


def build_registry(extra_rules_path: str | Path | None = None) -> RuleRegistry:
    """Built-in catalog, optionally followed by the rules in ``extra_rules_path``."""
    registry = default_registry()
    if extra_rules_path is not None:
        registry = registry.extend(load_rules(extra_rules_path))
        logger.info("Rule catalog extended from %s (%d rules)", extra_rules_path, len(registry))
    return registry
