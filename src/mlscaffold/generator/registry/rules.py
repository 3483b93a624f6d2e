# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Compatibility rules and registry.

Each rule is a pure predicate over a normalized Configuration. The rule set is
the conjunction of all registered rules; validation evaluates every rule and
reports all violations.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable

from ..errors import CompatibilityError
from ..inputs.schema import Configuration
from .axes import AXES

logger = logging.getLogger(__name__)

TABULAR_FRAMEWORKS = ("sklearn", "xgboost", "tensorflow")
HTTP_SERVERS = ("flask", "fastapi")
_HUB_PATH = re.compile(r"^[\w.\-]+/[\w.\-]+$")


@dataclass(frozen=True)
class CompatibilityRule:
    rule_id: str
    description: str
    predicate: Callable[[Configuration], bool]

    def holds(self, config: Configuration) -> bool:
        return bool(self.predicate(config))


class RuleSet:
    """Ordered, order-insensitive collection of compatibility rules."""

    def __init__(self, rules: Iterable[CompatibilityRule] = ()):
        self._rules: dict[str, CompatibilityRule] = {}
        for rule in rules:
            self.add(rule)

    def add(self, rule: CompatibilityRule) -> CompatibilityRule:
        if rule.rule_id in self._rules:
            raise ValueError(f"Duplicate compatibility rule '{rule.rule_id}'")
        self._rules[rule.rule_id] = rule
        return rule

    def register(self, rule_id: str, description: str):
        """Decorator to register a predicate as a rule."""
        def _wrap(fn: Callable[[Configuration], bool]):
            self.add(CompatibilityRule(rule_id, description, fn))
            return fn
        return _wrap

    @property
    def rules(self) -> tuple[CompatibilityRule, ...]:
        return tuple(self._rules.values())

    def describe(self) -> dict[str, str]:
        return {r.rule_id: r.description for r in self._rules.values()}

    def validate(self, config: Configuration) -> list[str]:
        """Return the ids of every violated rule, in registration order."""
        violations = [r.rule_id for r in self._rules.values() if not r.holds(config)]
        if violations:
            logger.debug("Variant %s violates %s", config.label(), violations)
        return violations

    def raise_for_violations(self, config: Configuration) -> None:
        violations = self.validate(config)
        if violations:
            raise CompatibilityError(violations, {v: self._rules[v].description for v in violations})

    def is_supported(self, config: Configuration) -> bool:
        return not self.validate(config)


RULES = RuleSet()


@RULES.register(
    "sglang-server-iff-sglang-framework",
    "modelServer=sglang and framework=sglang must be chosen together",
)
def _sglang_pairing(config: Configuration) -> bool:
    return (config.model_server == "sglang") == (config.framework == "sglang")


@RULES.register(
    "model-format-legal-for-framework",
    "modelFormat must be one of the formats supported by the chosen framework",
)
def _format_matches_framework(config: Configuration) -> bool:
    legal = AXES.legal_values("modelFormat", {"framework": config.framework})
    if not legal:
        return config.model_format is None
    return config.model_format in legal


@RULES.register(
    "http-server-requires-tabular-framework",
    f"modelServer in {list(HTTP_SERVERS)} requires framework in {list(TABULAR_FRAMEWORKS)}",
)
def _http_server_framework(config: Configuration) -> bool:
    if config.model_server not in HTTP_SERVERS:
        return True
    return config.framework in TABULAR_FRAMEWORKS


@RULES.register(
    "sglang-model-is-hub-path",
    "framework=sglang requires model to be a full Hugging Face path such as org/model-name",
)
def _sglang_model_path(config: Configuration) -> bool:
    if config.framework != "sglang":
        return True
    return bool(config.model) and bool(_HUB_PATH.match(config.model))
