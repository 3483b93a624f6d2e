# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Data schema for generator.

This module defines the immutable definitions of configuration axes and the
validated Configuration consumed by the composer, decoupled from the raw
dict / YAML / CLI inputs they are built from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class AxisDefinition:
    """
    A named configuration dimension.

    values: the full ordered domain of the axis.
    parent: name of the axis whose chosen value narrows this one.
    values_by_parent: legal ordered subset for each parent value. An empty
        tuple means the axis does not apply under that parent value.
    default: value used when the caller omits the axis. For dependent axes
        the default is the first legal value under the chosen parent.
    """

    name: str
    values: tuple[str, ...]
    parent: str | None = None
    values_by_parent: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    default: str | None = None
    help: str = ""

    def legal_for(self, parent_value: str | None) -> tuple[str, ...]:
        if self.parent is None or parent_value is None:
            return self.values
        return tuple(self.values_by_parent.get(parent_value, ()))


@dataclass(frozen=True)
class ParameterDefinition:
    """Free-form string setting, used only while `when_axis == when_value`."""

    name: str
    default: str
    when_axis: str
    when_value: str
    help: str = ""


@dataclass(frozen=True)
class Configuration:
    """
    Complete, normalized view of one variant.

    values maps every axis and active parameter to its chosen value. Axes that
    do not apply to the variant map to None.
    """

    values: Mapping[str, Any]
    include_sample_model: bool = True
    include_testing: bool = True

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    @property
    def model_server(self) -> str:
        return self.values["modelServer"]

    @property
    def framework(self) -> str:
        return self.values["framework"]

    @property
    def model_format(self) -> str | None:
        return self.values.get("modelFormat")

    @property
    def model(self) -> str | None:
        return self.values.get("model")

    def as_dict(self) -> dict[str, Any]:
        out = dict(self.values)
        out["include_sample_model"] = self.include_sample_model
        out["include_testing"] = self.include_testing
        return out

    def label(self) -> str:
        return "/".join(str(self.values.get(k)) for k in ("modelServer", "framework", "modelFormat"))
