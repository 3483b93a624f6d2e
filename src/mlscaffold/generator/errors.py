# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Error types for scaffold generation.

Every stage raises one of these with the complete list of problems it found,
so a caller can fix a configuration in one pass.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Mapping, Sequence


class ErrorCode(Enum):
    UNKNOWN_AXIS = auto()
    MISSING_DEPENDENT_AXIS = auto()
    ILLEGAL_VALUE = auto()
    INVALID_CONFIGURATION = auto()
    INCOMPATIBLE_VARIANT = auto()
    MISSING_FRAGMENT = auto()
    INCONSISTENT_ARTIFACTS = auto()
    WRITE_CONFLICT = auto()


class ScaffoldError(Exception):
    """Base error carrying a code and structured context."""

    def __init__(self, code: ErrorCode, ctx: Mapping[str, Any] | None = None):
        self.code = code
        self.ctx = dict(ctx or {})
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.ctx:
            return self.code.name
        parts = ", ".join(f"{k}={v!r}" for k, v in self.ctx.items())
        return f"{self.code.name}: {parts}"

    def problems(self) -> list[str]:
        """Human readable lines, one per actionable problem."""
        return [str(self)]


@dataclass(frozen=True)
class ConfigurationIssue:
    """One problem found while normalizing a raw configuration."""

    code: ErrorCode
    axis: str
    message: str


class ConfigurationError(ScaffoldError):
    """Unknown axis, missing dependent axis or a value outside an axis domain."""

    def __init__(self, issues: Sequence[ConfigurationIssue]):
        self.issues = list(issues)
        codes = {i.code for i in self.issues}
        code = codes.pop() if len(codes) == 1 else ErrorCode.INVALID_CONFIGURATION
        super().__init__(code, {"issues": [i.message for i in self.issues]})

    def problems(self) -> list[str]:
        return [f"{i.code.name}: {i.message}" for i in self.issues]


class UnknownAxis(ConfigurationError):
    def __init__(self, axis: str):
        super().__init__([ConfigurationIssue(ErrorCode.UNKNOWN_AXIS, axis, f"unknown axis '{axis}'")])


class CompatibilityError(ScaffoldError):
    """One or more compatibility rules rejected the configuration."""

    def __init__(self, violations: Sequence[str], descriptions: Mapping[str, str] | None = None):
        self.violations = list(violations)
        self.descriptions = dict(descriptions or {})
        super().__init__(ErrorCode.INCOMPATIBLE_VARIANT, {"violations": self.violations})

    def problems(self) -> list[str]:
        return [
            f"{rule_id}: {self.descriptions[rule_id]}" if rule_id in self.descriptions else rule_id
            for rule_id in self.violations
        ]


class InternalInvariantError(ScaffoldError):
    """The static definitions disagree with each other. Never a user mistake."""


class MissingFragment(InternalInvariantError):
    def __init__(self, artifact: str, axis: str, value: Any, section: str | None = None):
        ctx = {"artifact": artifact, "axis": axis, "value": value}
        if section is not None:
            ctx["section"] = section
        super().__init__(ErrorCode.MISSING_FRAGMENT, ctx)


class ConsistencyError(ScaffoldError):
    """Rendered artifacts disagree on a cross-artifact invariant."""

    def __init__(self, findings: Sequence[Any]):
        self.findings = list(findings)
        super().__init__(
            ErrorCode.INCONSISTENT_ARTIFACTS,
            {"invariants": sorted({f.invariant for f in self.findings})},
        )

    def problems(self) -> list[str]:
        return [str(f) for f in self.findings]


class WriteConflict(ScaffoldError):
    """Target files already exist and overwrite was not requested."""

    def __init__(self, paths: Sequence[str]):
        self.paths = list(paths)
        super().__init__(ErrorCode.WRITE_CONFLICT, {"paths": self.paths})

    def problems(self) -> list[str]:
        return [f"{ErrorCode.WRITE_CONFLICT.name}: {p} already exists" for p in self.paths]
