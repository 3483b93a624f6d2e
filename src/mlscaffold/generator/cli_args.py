# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Argparse for generator.

This module walks the axis registry to auto-inject one CLI option per axis and
parameter, and exposes a 'build_overrides' helper to turn the parsed namespace
into the override mapping consumed by InputParser.
"""
import argparse
from typing import Any, Dict

from .registry.axes import AXES, AxisRegistry


def _axis_help(axis) -> str:
    doc = axis.help
    if axis.parent:
        subsets = "; ".join(
            f"{parent}: {', '.join(vals) or 'n/a'}" for parent, vals in axis.values_by_parent.items()
        )
        doc += f" Depends on --{axis.parent} ({subsets})."
    elif axis.default is not None:
        doc += f" (default: {axis.default})"
    return doc


def add_axis_cli(parser: argparse.ArgumentParser, registry: AxisRegistry = AXES) -> None:
    """
    Inject axis / parameter override options into an existing ArgumentParser.

    Options default to None so that values from --config are only replaced
    when a flag is given. Axis values are left to the registry, which reports
    every illegal value in one ConfigurationError.
    """
    grp = parser.add_argument_group("Variant selection. Flags override values loaded from --config.")
    for axis in registry.axes:
        grp.add_argument(
            f"--{axis.name}",
            type=str,
            default=None,
            metavar="{" + ",".join(axis.values) + "}",
            help=_axis_help(axis),
        )
    for param in registry.parameters:
        doc = f"{param.help} Used when {param.when_axis}={param.when_value} (default: {param.default})."
        grp.add_argument(f"--{param.name}", type=str, default=None, help=doc)

    grp.add_argument(
        "--no-sample-model",
        dest="include_sample_model",
        action="store_const",
        const=False,
        default=None,
        help="Skip the sample_model/ training and inference scripts.",
    )
    grp.add_argument(
        "--no-testing",
        dest="include_testing",
        action="store_const",
        const=False,
        default=None,
        help="Skip the test/ harness.",
    )
    parser.set_defaults(_axis_names=registry.names() + [p.name for p in registry.parameters])


def build_overrides(args) -> Dict[str, Any]:
    """Collect the axis, parameter and toggle flags that were actually given."""
    names = getattr(args, "_axis_names", ())
    overrides = {k: getattr(args, k) for k in names if getattr(args, k, None) is not None}
    for toggle in ("include_sample_model", "include_testing"):
        value = getattr(args, toggle, None)
        if value is not None:
            overrides[toggle] = value
    return overrides
