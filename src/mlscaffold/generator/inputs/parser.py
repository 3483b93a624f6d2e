# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Input parser that transforms raw dict / YAML input into a normalized Configuration.
"""
from typing import Any, Mapping, Optional

import yaml

from ..registry.axes import AXES, AxisRegistry
from .schema import Configuration

_TOGGLES = ("include_sample_model", "include_testing")


class InputParser:
    """Factory of Configuration from runtime objects."""

    @staticmethod
    def _as_bool(name: str, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in {"true", "false"}:
            return value.lower() == "true"
        raise ValueError(f"'{name}' must be a boolean, got {value!r}")

    @staticmethod
    def split_toggles(cfg: Mapping[str, Any]) -> tuple[dict, dict]:
        """Separate module toggles from axis / parameter values."""
        axes, toggles = {}, {}
        for k, v in cfg.items():
            if k in _TOGGLES:
                if v is not None:
                    toggles[k] = InputParser._as_bool(k, v)
            else:
                axes[k] = v
        return axes, toggles

    @staticmethod
    def load_yaml(yaml_path: str) -> dict:
        try:
            with open(yaml_path, encoding="utf-8") as f:
                cfg = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ValueError(f"Failed to load yaml file: {yaml_path}") from e
        if not isinstance(cfg, dict):
            raise ValueError(f"Configuration root must be a mapping: {yaml_path}")
        return cfg

    @staticmethod
    def from_runtime(cfg: Mapping[str, Any], overrides: Optional[Mapping[str, Any]] = None,
                     registry: AxisRegistry = AXES) -> Configuration:
        """
        Normalize cfg, with non-None overrides taking precedence.

        Raises ConfigurationError listing every problem found.
        """
        merged = dict(cfg or {})
        merged.update({k: v for k, v in (overrides or {}).items() if v is not None})
        axes, toggles = InputParser.split_toggles(merged)
        return registry.normalize(axes, **toggles)
