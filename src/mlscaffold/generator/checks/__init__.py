# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from .consistency import CHECKER, ConsistencyChecker, ConsistencyFinding, check

__all__ = ["CHECKER", "ConsistencyChecker", "ConsistencyFinding", "check"]
