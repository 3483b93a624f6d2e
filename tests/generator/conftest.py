# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import pytest
import yaml

from mlscaffold.generator.artifacts import ARTIFACTS
from mlscaffold.generator.fragments.store import TEMPLATE_ROOT, FragmentStore, get_store
from mlscaffold.generator.registry.axes import AXES


def _table_texts():
    return {spec.name: (TEMPLATE_ROOT / f"{spec.table}.yaml").read_text(encoding="utf-8") for spec in ARTIFACTS}


@pytest.fixture
def store():
    """Process-wide fragment store loaded from the packaged tables."""
    return get_store()


@pytest.fixture
def raw_tables():
    """Freshly parsed fragment tables, safe to mutate."""
    return {name: yaml.safe_load(text) for name, text in _table_texts().items()}


@pytest.fixture
def tampered_store():
    """Factory for a store whose table for `artifact` has `old` replaced by `new`."""
    def _build(artifact, old, new):
        texts = _table_texts()
        assert old in texts[artifact], f"{old!r} not found in the {artifact} table"
        texts[artifact] = texts[artifact].replace(old, new)
        return FragmentStore({name: yaml.safe_load(text) for name, text in texts.items()})
    return _build


@pytest.fixture
def make_config():
    """Factory normalizing keyword axis values into a Configuration."""
    def _build(**values):
        toggles = {k: values.pop(k) for k in ("include_sample_model", "include_testing") if k in values}
        return AXES.normalize(values, **toggles)
    return _build


@pytest.fixture
def scenario_a(make_config):
    return make_config(modelServer="flask", framework="sklearn", modelFormat="joblib")


@pytest.fixture
def scenario_c(make_config):
    return make_config(modelServer="fastapi", framework="tensorflow", modelFormat="SavedModel")


@pytest.fixture
def sglang_config(make_config):
    return make_config(modelServer="sglang", framework="sglang")
