# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass, field

from .inputs.schema import Configuration


@dataclass(frozen=True)
class CompositionResult:
    """Rendered text of one artifact."""

    artifact: str
    path: str
    content: str


@dataclass
class ScaffoldBundle:
    """In-memory representation of one generation request."""

    config: Configuration
    results: list[CompositionResult]
    written: list[str] = field(default_factory=list)

    @property
    def by_path(self) -> dict[str, str]:
        return {r.path: r.content for r in self.results}

    @property
    def by_artifact(self) -> dict[str, CompositionResult]:
        return {r.artifact: r for r in self.results}
