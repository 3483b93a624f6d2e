# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging
import os
from typing import List, Sequence, Tuple

from prettytable import PrettyTable

from mlscaffold.generator.inputs.schema import Configuration
from mlscaffold.generator.types import ScaffoldBundle

logger = logging.getLogger(__name__)


def variant_table(variants: Sequence[Tuple[Configuration, List[str]]], include_unsupported: bool = False) -> str:
    """Table of the variant space, one row per (modelServer, framework, modelFormat)."""
    table = PrettyTable()
    columns = ["modelServer", "framework", "modelFormat"]
    table.field_names = ["#"] + columns + (["violated rules"] if include_unsupported else [])
    table.align = "l"
    rank = 0
    for config, violations in variants:
        if violations and not include_unsupported:
            continue
        rank += 1
        row = [rank] + [config.get(c) if config.get(c) is not None else "-" for c in columns]
        if include_unsupported:
            row.append("\n".join(violations) if violations else "supported")
        table.add_row(row)
    return table.get_string()


def bundle_table(bundle: ScaffoldBundle) -> str:
    """Table of the artifacts in a bundle."""
    table = PrettyTable()
    table.field_names = ["artifact", "path", "lines"]
    table.align = "l"
    for result in bundle.results:
        table.add_row([result.artifact, result.path, result.content.count("\n")])
    return table.get_string()


def log_bundle_summary(bundle: ScaffoldBundle, output_dir: str | None) -> None:
    logger.info("Variant: %s", bundle.config.label())
    if bundle.config.model:
        logger.info("Model: %s", bundle.config.model)
    logger.info("Artifacts:\n%s", bundle_table(bundle))
    if bundle.written:
        logger.info("Saved %d files under %s", len(bundle.written), os.path.abspath(output_dir))
    else:
        logger.info("Dry run, nothing written")
