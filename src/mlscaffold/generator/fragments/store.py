# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Fragment store.

Fragments are loaded from one YAML table per artifact (templates/<table>.yaml):

    always:
      <section>: <text>
    <axis>:
      <value>:
        <section>: <text or ~ for an absent section>

A `~` (null) value key holds the fragment used when an axis does not apply to
the variant. Section text is a Jinja template rendered against the contract
context, with StrictUndefined so a typo in a fragment fails loudly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from jinja2 import Environment, StrictUndefined, Template

from ..artifacts import ALWAYS, ARTIFACTS, ArtifactSpec, FragmentRef
from ..errors import ErrorCode, InternalInvariantError, MissingFragment
from ..inputs.schema import Configuration
from ..registry import AXES, RULES

logger = logging.getLogger(__name__)

TEMPLATE_ROOT = Path(__file__).resolve().parents[1] / "templates"

_ENV = Environment(
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
    autoescape=False,
)


@dataclass(frozen=True)
class Fragment:
    """Sections of source text for one (artifact, axis, value) key."""

    artifact: str
    axis: str
    value: Any
    sections: Mapping[str, Template | None]

    @property
    def key(self) -> tuple[str, str, Any]:
        return (self.artifact, self.axis, self.value)

    def render(self, section: str, context: Mapping[str, Any]) -> str:
        """Rendered text of `section`, or '' when the section is registered absent."""
        if section not in self.sections:
            raise MissingFragment(self.artifact, self.axis, self.value, section)
        tpl = self.sections[section]
        if tpl is None:
            return ""
        return tpl.render(**context)


def _compile(artifact: str, axis: str, value: Any, sections: Any) -> Fragment:
    if not isinstance(sections, Mapping):
        raise InternalInvariantError(
            ErrorCode.MISSING_FRAGMENT,
            {"artifact": artifact, "axis": axis, "value": value, "error": "fragment must be a mapping of sections"},
        )
    compiled = {
        name: (None if text is None else _ENV.from_string(str(text)))
        for name, text in sections.items()
    }
    return Fragment(artifact, axis, value, compiled)


class FragmentStore:
    """Read-only lookup of fragments keyed by (artifact, axis, value)."""

    def __init__(self, tables: Mapping[str, Mapping[str, Any]]):
        """tables maps artifact name to its parsed YAML table."""
        self._fragments: dict[tuple[str, str, Any], Fragment] = {}
        for artifact, table in tables.items():
            for axis, entries in (table or {}).items():
                if axis == ALWAYS:
                    frag = _compile(artifact, ALWAYS, ALWAYS, entries)
                    self._fragments[frag.key] = frag
                    continue
                for value, sections in (entries or {}).items():
                    frag = _compile(artifact, axis, value, sections)
                    self._fragments[frag.key] = frag

    @classmethod
    def from_directory(cls, root: Path = TEMPLATE_ROOT, specs: Iterable[ArtifactSpec] = ARTIFACTS) -> "FragmentStore":
        tables: dict[str, Mapping[str, Any]] = {}
        for spec in specs:
            path = Path(root) / f"{spec.table}.yaml"
            try:
                with open(path, encoding="utf-8") as f:
                    tables[spec.name] = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise InternalInvariantError(
                    ErrorCode.MISSING_FRAGMENT,
                    {"artifact": spec.name, "table": str(path), "error": str(e)},
                ) from e
            logger.debug("Loaded fragment table %s for %s", path.name, spec.name)
        return cls(tables)

    def __len__(self) -> int:
        return len(self._fragments)

    def keys(self) -> list[tuple[str, str, Any]]:
        return list(self._fragments)

    def lookup(self, artifact: str, axis: str, value: Any) -> Fragment:
        try:
            return self._fragments[(artifact, axis, value)]
        except KeyError:
            raise MissingFragment(artifact, axis, value) from None

    def fragments_for(self, spec: ArtifactSpec, config: Configuration) -> dict[str, Fragment]:
        """The fragment selected for each axis referenced by the artifact's slots."""
        out: dict[str, Fragment] = {}
        for axis in spec.axes:
            value = ALWAYS if axis == ALWAYS else config.get(axis)
            out[axis] = self.lookup(spec.name, axis, value)
        return out

    def verify(self, specs: Iterable[ArtifactSpec], configs: Iterable[Configuration]) -> list[MissingFragment]:
        """
        Resolve every slot of every applicable artifact for each configuration
        and return the divergences found, without rendering.
        """
        missing: dict[tuple, MissingFragment] = {}
        specs = list(specs)
        for config in configs:
            for spec in specs:
                if not spec.applies(config):
                    continue
                for slot_axis, section in ((s.axis, s.section) for s in spec.slots if isinstance(s, FragmentRef)):
                    value = ALWAYS if slot_axis == ALWAYS else config.get(slot_axis)
                    frag = self._fragments.get((spec.name, slot_axis, value))
                    if frag is None:
                        err = MissingFragment(spec.name, slot_axis, value)
                    elif section not in frag.sections:
                        err = MissingFragment(spec.name, slot_axis, value, section)
                    else:
                        continue
                    missing.setdefault(tuple(err.ctx.values()), err)
        return list(missing.values())


def _supported_configs() -> list[Configuration]:
    configs = (AXES.normalize(raw) for raw in AXES.variant_space())
    return [config for config in configs if RULES.is_supported(config)]


@lru_cache(maxsize=1)
def get_store() -> FragmentStore:
    """
    Process-wide store, loaded on first use and never mutated.

    The packaged tables are verified against every supported variant.
    """
    store = FragmentStore.from_directory()
    missing = store.verify(ARTIFACTS, _supported_configs())
    if missing:
        for err in missing:
            logger.error("Fragment table divergence: %s", err)
        raise missing[0]
    logger.debug("Loaded %d fragments", len(store))
    return store
