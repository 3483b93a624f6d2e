# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Composer: assembles artifact text from skeleton slots and selected fragments.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from .artifacts import ArtifactSpec, FragmentRef, Text, applicable_artifacts
from .fragments.store import FragmentStore, get_store
from .inputs.schema import Configuration
from .registry.contracts import render_context
from .types import CompositionResult

logger = logging.getLogger(__name__)


def render(spec: ArtifactSpec, config: Configuration, store: FragmentStore | None = None) -> CompositionResult:
    """Render one artifact. Pure in (spec, config, store)."""
    store = store or get_store()
    context = render_context(config)
    fragments = store.fragments_for(spec, config)
    parts: list[str] = []
    for slot in spec.slots:
        if isinstance(slot, Text):
            parts.append(slot.text)
        elif isinstance(slot, FragmentRef):
            parts.append(fragments[slot.axis].render(slot.section, context))
        else:
            raise TypeError(f"Unsupported slot {slot!r} in artifact '{spec.name}'")
    return CompositionResult(artifact=spec.name, path=spec.path, content="".join(parts))


def render_all(
    config: Configuration,
    specs: Iterable[ArtifactSpec] | None = None,
    store: FragmentStore | None = None,
    parallel: bool = False,
) -> list[CompositionResult]:
    """
    Render every applicable artifact, in declaration order.

    Returns only after every render has finished, so callers can reason over
    the complete set.
    """
    store = store or get_store()
    specs = [s for s in specs if s.applies(config)] if specs is not None else applicable_artifacts(config)
    if parallel and len(specs) > 1:
        with ThreadPoolExecutor(max_workers=len(specs)) as pool:
            futures = [pool.submit(render, spec, config, store) for spec in specs]
            results = [f.result() for f in futures]
    else:
        results = [render(spec, config, store) for spec in specs]
    logger.debug("Rendered %d artifacts for %s", len(results), config.label())
    return results
