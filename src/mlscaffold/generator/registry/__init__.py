# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Registry initializer.

Exposes the process-wide axis registry and compatibility rule set, both built
at import time and read-only afterwards.
"""
from .axes import AXES, AxisRegistry
from .rules import RULES, CompatibilityRule, RuleSet

__all__ = ["AXES", "AxisRegistry", "RULES", "CompatibilityRule", "RuleSet"]
