# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
from .store import Fragment, FragmentStore, get_store

__all__ = ["Fragment", "FragmentStore", "get_store"]
