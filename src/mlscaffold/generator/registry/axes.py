# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Axis registry.

Declares the configuration axes, their legal values, and the parameters that
only apply to some variants. Built once at import and read-only afterwards.
"""
from __future__ import annotations

import itertools
import logging
from typing import Any, Iterator, Mapping, Sequence

from ..errors import ConfigurationError, ConfigurationIssue, ErrorCode, UnknownAxis
from ..inputs.schema import AxisDefinition, Configuration, ParameterDefinition
from .contracts import DEFAULT_LLM_MODEL

logger = logging.getLogger(__name__)


class AxisRegistry:
    """Ordered collection of axes. Parents must be declared before their children."""

    def __init__(self, axes: Sequence[AxisDefinition], parameters: Sequence[ParameterDefinition] = ()):
        self._axes: dict[str, AxisDefinition] = {}
        for axis in axes:
            if axis.parent is not None and axis.parent not in self._axes:
                raise ValueError(f"Axis '{axis.name}' declared before its parent '{axis.parent}'")
            for parent_value, subset in axis.values_by_parent.items():
                stray = set(subset) - set(axis.values)
                if stray:
                    raise ValueError(f"Axis '{axis.name}' lists {sorted(stray)} under '{parent_value}' outside its domain")
            self._axes[axis.name] = axis
        self._params: dict[str, ParameterDefinition] = {p.name: p for p in parameters}

    @property
    def axes(self) -> tuple[AxisDefinition, ...]:
        return tuple(self._axes.values())

    @property
    def parameters(self) -> tuple[ParameterDefinition, ...]:
        return tuple(self._params.values())

    def names(self) -> list[str]:
        return list(self._axes)

    def get(self, name: str) -> AxisDefinition:
        if name not in self._axes:
            raise UnknownAxis(name)
        return self._axes[name]

    def legal_values(self, axis: str, context: Mapping[str, Any] | None = None) -> tuple[str, ...]:
        """Permitted values for `axis` given the ancestor choices in `context`."""
        definition = self.get(axis)
        context = context or {}
        if definition.parent is not None and definition.parent in context:
            return definition.legal_for(context[definition.parent])
        return definition.values

    def normalize(
        self,
        raw: Mapping[str, Any],
        include_sample_model: bool = True,
        include_testing: bool = True,
    ) -> Configuration:
        """
        Fill documented defaults and reject anything that is not a known axis
        value. Every problem is collected before raising.
        """
        issues: list[ConfigurationIssue] = []
        for key in raw:
            if key not in self._axes and key not in self._params:
                issues.append(ConfigurationIssue(ErrorCode.UNKNOWN_AXIS, key, f"unknown axis '{key}'"))

        values: dict[str, Any] = {}
        unresolved: set[str] = set()
        for axis in self._axes.values():
            supplied = raw.get(axis.name) is not None
            value = raw.get(axis.name)

            if axis.parent is not None and axis.parent in unresolved:
                if not supplied:
                    issues.append(ConfigurationIssue(
                        ErrorCode.MISSING_DEPENDENT_AXIS,
                        axis.name,
                        f"'{axis.name}' was omitted and cannot be defaulted because '{axis.parent}' is unresolved",
                    ))
                elif value not in axis.values:
                    issues.append(self._illegal(axis, value))
                unresolved.add(axis.name)
                continue

            legal = axis.legal_for(values.get(axis.parent)) if axis.parent else axis.values
            if axis.parent is not None and not legal:
                if supplied:
                    logger.info("Ignoring %s=%r: not used when %s=%s", axis.name, value, axis.parent, values[axis.parent])
                values[axis.name] = None
                continue

            if not supplied:
                default = axis.default if axis.parent is None else legal[0]
                if default is None:
                    issues.append(ConfigurationIssue(
                        ErrorCode.MISSING_DEPENDENT_AXIS, axis.name, f"'{axis.name}' is required"
                    ))
                    unresolved.add(axis.name)
                    continue
                logger.debug("Defaulting %s=%s", axis.name, default)
                values[axis.name] = default
            elif value not in axis.values:
                issues.append(self._illegal(axis, value))
                unresolved.add(axis.name)
            else:
                values[axis.name] = value

        for param in self._params.values():
            value = raw.get(param.name)
            if param.when_axis in unresolved:
                continue
            if values.get(param.when_axis) != param.when_value:
                if value is not None:
                    logger.info("Ignoring %s=%r: only used when %s=%s", param.name, value, param.when_axis, param.when_value)
                continue
            values[param.name] = param.default if value is None else str(value).strip()

        if issues:
            raise ConfigurationError(issues)
        return Configuration(
            values=values,
            include_sample_model=include_sample_model,
            include_testing=include_testing,
        )

    @staticmethod
    def _illegal(axis: AxisDefinition, value: Any) -> ConfigurationIssue:
        return ConfigurationIssue(
            ErrorCode.ILLEGAL_VALUE,
            axis.name,
            f"{axis.name}={value!r} is not one of {list(axis.values)}",
        )

    def variant_space(self) -> Iterator[dict[str, Any]]:
        """
        Every combination of axis values, with dependent axes narrowed by their
        parent. Compatibility rules are not applied here.
        """
        roots = [a for a in self._axes.values() if a.parent is None]
        for combo in itertools.product(*(a.values for a in roots)):
            yield from self._expand(dict(zip((a.name for a in roots), combo)))

    def _expand(self, partial: dict[str, Any]) -> Iterator[dict[str, Any]]:
        for axis in self._axes.values():
            if axis.name in partial:
                continue
            legal = axis.legal_for(partial.get(axis.parent))
            if not legal:
                partial = {**partial, axis.name: None}
                continue
            for value in legal:
                yield from self._expand({**partial, axis.name: value})
            return
        yield partial


AXES = AxisRegistry(
    axes=[
        AxisDefinition(
            name="modelServer",
            values=("flask", "fastapi", "sglang"),
            default="flask",
            help="Model server the inference endpoint runs on.",
        ),
        AxisDefinition(
            name="framework",
            values=("sklearn", "xgboost", "tensorflow", "sglang"),
            default="sklearn",
            help="ML framework the model is built with.",
        ),
        AxisDefinition(
            name="modelFormat",
            values=("joblib", "pkl", "json", "model", "ubj", "keras", "h5", "SavedModel"),
            parent="framework",
            values_by_parent={
                "sklearn": ("joblib", "pkl"),
                "xgboost": ("json", "model", "ubj"),
                "tensorflow": ("keras", "h5", "SavedModel"),
                "sglang": (),
            },
            help="Serialization format of the trained model.",
        ),
    ],
    parameters=[
        ParameterDefinition(
            name="model",
            default=DEFAULT_LLM_MODEL,
            when_axis="framework",
            when_value="sglang",
            help="Hugging Face model id served by the SGLang runtime.",
        ),
    ],
)
