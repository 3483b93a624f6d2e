# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
generator:

The generator provides scaffold generation that can be used by both the CLI
and other Python callers. It offers:
- An API (api.py) that accepts a raw configuration or a YAML file and optionally saves files.
- An axis registry and compatibility rule set (registry/*).
- A fragment store backed by YAML fragment tables (fragments/*, templates/*).
- A composer that assembles artifacts from their skeletons (artifacts.py, composer.py).
- A consistency checker over the rendered artifact set (checks/*).
- Utilities for saving artifacts (utils/*).
"""
from .api import enumerate_variants, generate_scaffold
