# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Cross-artifact consistency checks.

Runs over the complete set of rendered artifacts for one configuration and
asserts the invariants that tie them together:

- format-symmetry: the training script saves, and every loader reads, the
  file implied by modelFormat, through that format's save / load calls.
- server-contract: /ping and /invocations follow the request/response idiom
  of modelServer.
- port-env: every artifact that binds a port reads the same env var and default.
- model-id: LLM artifacts embed the configured model id.

Artifacts are inspected with `ast`; an artifact that does not parse is itself
reported, since nothing can be verified on it.
"""
from __future__ import annotations

import ast
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from ..artifacts import ARTIFACTS, ArtifactSpec
from ..errors import ConsistencyError
from ..inputs.schema import Configuration
from ..registry.contracts import (
    DEFAULT_PORT,
    ERROR_STATUSES,
    FORMATS,
    HEALTH_ROUTE,
    INFERENCE_ROUTE,
    MODEL_STEM,
    PORT_ENV_VAR,
    SERVER_IDIOMS,
)
from ..types import CompositionResult

logger = logging.getLogger(__name__)

FORMAT_SYMMETRY = "format-symmetry"
SERVER_CONTRACT = "server-contract"
PORT_ENV = "port-env"
MODEL_ID = "model-id"
PARSEABLE = "parseable"

_MODEL_REF = re.compile(rf"^(?:.*/)?({re.escape(MODEL_STEM)}(?:\.\w+)?)/?$")


@dataclass(frozen=True)
class ConsistencyFinding:
    invariant: str
    artifacts: tuple[str, ...]
    axis: str | None
    expected: Any
    actual: Any
    message: str

    def __str__(self) -> str:
        where = " vs ".join(self.artifacts)
        return f"{self.invariant} [{where}] {self.message} (expected {self.expected!r}, got {self.actual!r})"


def _dotted(node: ast.AST) -> str:
    """Dotted name of a call target, e.g. `tf.keras.models.load_model`."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted(node.value)
        return f"{base}.{node.attr}" if base else node.attr
    if isinstance(node, ast.Call):
        return _dotted(node.func) + "()"
    return ""


def _matches(name: str, target: str) -> bool:
    return name == target or name.endswith("." + target)


def _calls(tree: ast.AST) -> list[tuple[str, ast.Call]]:
    return [(_dotted(n.func), n) for n in ast.walk(tree) if isinstance(n, ast.Call)]


def _model_refs(tree: ast.AST) -> set[str]:
    refs = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Constant) and isinstance(node.value, str):
            m = _MODEL_REF.match(node.value)
            if m:
                refs.add(m.group(1))
    return refs


def _str_constants(tree: ast.AST) -> set[str]:
    return {n.value for n in ast.walk(tree) if isinstance(n, ast.Constant) and isinstance(n.value, str)}


def _int_value(node: ast.AST | None) -> int | None:
    if isinstance(node, ast.Constant) and isinstance(node.value, int) and not isinstance(node.value, bool):
        return node.value
    return None


class _Artifact:
    """Parsed view of one rendered artifact."""

    def __init__(self, spec: ArtifactSpec, result: CompositionResult):
        self.spec = spec
        self.result = result
        self.tree: ast.AST | None = None
        self.error: str | None = None
        try:
            self.tree = ast.parse(result.content, filename=result.path)
        except SyntaxError as e:
            self.error = f"line {e.lineno}: {e.msg}"

    @property
    def name(self) -> str:
        return self.spec.name


class ConsistencyChecker:
    """Fixed list of cross-artifact invariants."""

    def __init__(self, specs: Iterable[ArtifactSpec] = ARTIFACTS):
        self._specs = {s.name: s for s in specs}

    def check(self, config: Configuration, results: Sequence[CompositionResult]) -> list[ConsistencyFinding]:
        """Return every finding; an empty list means the set is consistent."""
        findings: list[ConsistencyFinding] = []
        parsed: list[_Artifact] = []
        for result in results:
            if result.artifact not in self._specs:
                raise KeyError(f"No artifact spec registered for '{result.artifact}'")
            art = _Artifact(self._specs[result.artifact], result)
            if art.error is not None:
                findings.append(ConsistencyFinding(
                    PARSEABLE, (art.name,), None, "valid Python", art.error,
                    f"{art.result.path} cannot be analysed",
                ))
                continue
            parsed.append(art)

        findings.extend(self._format_symmetry(config, parsed))
        findings.extend(self._server_contract(config, parsed))
        findings.extend(self._port_env(parsed))
        findings.extend(self._model_id(config, parsed))
        if findings:
            logger.debug("Consistency check for %s found %d problems", config.label(), len(findings))
        return findings

    def raise_for_findings(self, config: Configuration, results: Sequence[CompositionResult]) -> None:
        findings = self.check(config, results)
        if findings:
            raise ConsistencyError(findings)

    # format symmetry
    def _format_symmetry(self, config: Configuration, arts: list[_Artifact]) -> list[ConsistencyFinding]:
        if config.model_format is None:
            return []
        fmt = FORMATS[config.model_format]
        out: list[ConsistencyFinding] = []
        savers = [a for a in arts if a.spec.saves_model]
        loaders = [a for a in arts if a.spec.loads_model]
        anchor = savers[0].name if savers else None

        for art, calls, verb in [(a, fmt.save_calls, "save") for a in savers] + [(a, fmt.load_calls, "load") for a in loaders]:
            pair = (anchor, art.name) if anchor and anchor != art.name else (art.name,)
            names = [n for n, _ in _calls(art.tree)]
            if not any(_matches(n, c) for n in names for c in calls):
                out.append(ConsistencyFinding(
                    FORMAT_SYMMETRY, pair, "modelFormat", list(calls), None,
                    f"{art.result.path} has no {verb} call for format '{config.model_format}'",
                ))
            refs = _model_refs(art.tree)
            if refs != {fmt.filename}:
                out.append(ConsistencyFinding(
                    FORMAT_SYMMETRY, pair, "modelFormat", fmt.filename, sorted(refs),
                    f"{art.result.path} references a model file other than the one implied by '{config.model_format}'",
                ))
        return out

    # server contract
    def _server_contract(self, config: Configuration, arts: list[_Artifact]) -> list[ConsistencyFinding]:
        idiom = SERVER_IDIOMS[config.model_server]
        out: list[ConsistencyFinding] = []
        for art in (a for a in arts if a.spec.serves_http):
            routes = self._routes(art.tree)
            for path, decorators, expected_statuses in (
                (HEALTH_ROUTE, idiom.health_decorators, {503}),
                (INFERENCE_ROUTE, idiom.inference_decorators, set(ERROR_STATUSES)),
            ):
                def finding(expected, actual, message):
                    return ConsistencyFinding(SERVER_CONTRACT, (art.name,), "modelServer", expected, actual, message)

                if path not in routes:
                    out.append(finding(path, sorted(routes), f"{art.result.path} does not define route {path}"))
                    continue
                fn, decorator = routes[path]
                if decorator not in decorators:
                    out.append(finding(list(decorators), decorator, f"route {path} is not declared the {config.model_server} way"))
                is_async = isinstance(fn, ast.AsyncFunctionDef)
                if is_async != idiom.is_async:
                    out.append(finding(
                        "coroutine" if idiom.is_async else "function",
                        "coroutine" if is_async else "function",
                        f"route {path} uses the wrong handler kind for {config.model_server}",
                    ))
                tuple_statuses, raised_statuses = self._statuses(fn)
                statuses, stray = (
                    (tuple_statuses, raised_statuses) if idiom.style == "status_tuple" else (raised_statuses, tuple_statuses)
                )
                if stray:
                    out.append(finding(idiom.style, sorted(stray), f"route {path} mixes error idioms"))
                if statuses != expected_statuses:
                    out.append(finding(sorted(expected_statuses), sorted(statuses), f"route {path} error statuses do not match {idiom.style}"))
        return out

    @staticmethod
    def _routes(tree: ast.AST) -> dict[str, tuple[ast.AST, str]]:
        routes: dict[str, tuple[ast.AST, str]] = {}
        for node in ast.walk(tree):
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            for dec in node.decorator_list:
                if not (isinstance(dec, ast.Call) and isinstance(dec.func, ast.Attribute) and dec.args):
                    continue
                first = dec.args[0]
                if isinstance(first, ast.Constant) and isinstance(first.value, str) and first.value.startswith("/"):
                    routes[first.value] = (node, dec.func.attr)
        return routes

    @staticmethod
    def _statuses(fn: ast.AST) -> tuple[set[int], set[int]]:
        """(statuses returned as (body, status) tuples, statuses raised via HTTPException)."""
        returned, raised = set(), set()
        for node in ast.walk(fn):
            if isinstance(node, ast.Return) and isinstance(node.value, ast.Tuple) and len(node.value.elts) == 2:
                status = _int_value(node.value.elts[1])
                if status is not None:
                    returned.add(status)
            elif isinstance(node, ast.Raise) and isinstance(node.exc, ast.Call) and _matches(_dotted(node.exc.func), "HTTPException"):
                kw = {k.arg: k.value for k in node.exc.keywords}
                status = _int_value(kw.get("status_code"))
                if status is not None and "detail" in kw:
                    raised.add(status)
        return returned, raised

    # port / environment
    def _port_env(self, arts: list[_Artifact]) -> list[ConsistencyFinding]:
        out: list[ConsistencyFinding] = []
        binders = [a for a in arts if a.spec.binds_port]
        expected = (PORT_ENV_VAR, str(DEFAULT_PORT))
        for art in binders:
            reads = self._env_port_reads(art.tree)
            others = tuple(a.name for a in binders if a is not art)
            pair = (art.name,) + others[:1]
            if not reads:
                out.append(ConsistencyFinding(
                    PORT_ENV, pair, None, expected, None,
                    f"{art.result.path} binds a port without reading {PORT_ENV_VAR}",
                ))
            for read in sorted(reads - {expected}, key=str):
                out.append(ConsistencyFinding(
                    PORT_ENV, pair, None, expected, read,
                    f"{art.result.path} reads the port from a different variable or default",
                ))
        return out

    @staticmethod
    def _env_port_reads(tree: ast.AST) -> set[tuple[str, str | None]]:
        reads = set()
        for name, call in _calls(tree):
            if not (_matches(name, "environ.get") or _matches(name, "getenv")):
                continue
            if not call.args or not isinstance(call.args[0], ast.Constant) or not isinstance(call.args[0].value, str):
                continue
            var = call.args[0].value
            if "PORT" not in var.upper():
                continue
            default = call.args[1] if len(call.args) > 1 else None
            reads.add((var, str(default.value) if isinstance(default, ast.Constant) else None))
        return reads

    # model id
    def _model_id(self, config: Configuration, arts: list[_Artifact]) -> list[ConsistencyFinding]:
        if config.framework != "sglang" or not config.model:
            return []
        out: list[ConsistencyFinding] = []
        embedders = [a for a in arts if a.spec.embeds_model_id]
        for art in embedders:
            if config.model not in _str_constants(art.tree):
                pair = (art.name,) + tuple(a.name for a in embedders if a is not art)[:1]
                out.append(ConsistencyFinding(
                    MODEL_ID, pair, "model", config.model, None,
                    f"{art.result.path} does not embed the configured model id",
                ))
        return out


CHECKER = ConsistencyChecker()


def check(config: Configuration, results: Sequence[CompositionResult]) -> list[ConsistencyFinding]:
    return CHECKER.check(config, results)
