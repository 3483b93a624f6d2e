# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
API for scaffold generation (runtime-first).

This module exposes a single entry point that:
- Accepts a raw configuration dict or a YAML file.
- Normalizes and validates it against the axis registry and compatibility rules.
- Renders every applicable artifact and checks cross-artifact consistency.
- Optionally saves the artifacts to disk, all or nothing.
"""
import logging
from typing import Any, List, Mapping, Optional, Tuple

from .checks.consistency import CHECKER
from .composer import render_all
from .fragments.store import get_store
from .inputs.parser import InputParser
from .inputs.schema import Configuration
from .registry.axes import AXES, AxisRegistry
from .registry.rules import RULES, RuleSet
from .types import ScaffoldBundle
from .utils.writers import CONFIG_RECORD, emit, render_config_record

logger = logging.getLogger(__name__)


class _GenerateAPI:
    @staticmethod
    def from_config(
        config: Configuration,
        save_dir: Optional[str] = None,
        overwrite: bool = False,
        parallel: bool = False,
        save_config: bool = False,
    ) -> ScaffoldBundle:
        """Generate artifacts from an already normalized configuration."""
        RULES.raise_for_violations(config)
        results = render_all(config, store=get_store(), parallel=parallel)
        CHECKER.raise_for_findings(config, results)
        bundle = ScaffoldBundle(config=config, results=results)
        if save_dir:
            files = dict(bundle.by_path)
            if save_config:
                files[CONFIG_RECORD] = render_config_record(config.as_dict())
            bundle.written = emit(save_dir, files, overwrite=overwrite)
        logger.info("Generated %s scaffold with %d artifacts", config.label(), len(results))
        return bundle

    @staticmethod
    def from_runtime(
        cfg: Mapping[str, Any],
        overrides: Optional[Mapping[str, Any]] = None,
        save_dir: Optional[str] = None,
        overwrite: bool = False,
        parallel: bool = False,
        save_config: bool = False,
    ) -> ScaffoldBundle:
        """Generate artifacts from runtime objects."""
        config = InputParser.from_runtime(cfg, overrides=overrides)
        return _GenerateAPI.from_config(
            config, save_dir=save_dir, overwrite=overwrite, parallel=parallel, save_config=save_config,
        )

    @staticmethod
    def from_file(
        yaml_path: str,
        overrides: Optional[Mapping[str, Any]] = None,
        save_dir: Optional[str] = None,
        overwrite: bool = False,
        parallel: bool = False,
        save_config: bool = False,
    ) -> ScaffoldBundle:
        """Generate artifacts from files."""
        cfg = InputParser.load_yaml(yaml_path)
        return _GenerateAPI.from_runtime(
            cfg, overrides=overrides, save_dir=save_dir, overwrite=overwrite,
            parallel=parallel, save_config=save_config,
        )


def enumerate_variants(registry: AxisRegistry = AXES, rules: RuleSet = RULES) -> List[Tuple[Configuration, List[str]]]:
    """
    Every point of the variant space with the ids of the rules it violates.
    An empty list marks a supported variant.
    """
    out = []
    for raw in registry.variant_space():
        config = registry.normalize(raw)
        out.append((config, rules.validate(config)))
    return out


# public alias
generate_scaffold = _GenerateAPI
