# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for artifact composition.

Every supported variant is rendered and checked end to end.
"""

import ast

import pytest

from mlscaffold.generator.api import enumerate_variants
from mlscaffold.generator.artifacts import ARTIFACT_PATHS, ARTIFACTS, SERVE, Text, applicable_artifacts, get_artifact
from mlscaffold.generator.checks.consistency import check
from mlscaffold.generator.composer import render, render_all
from mlscaffold.generator.registry.contracts import DEFAULT_PORT, PORT_ENV_VAR

SUPPORTED = [config for config, violations in enumerate_variants() if not violations]


def _label(config):
    return config.label()


class TestComposeAllVariants:
    """Every supported variant composes into a consistent, parseable artifact set."""

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_variant_has_no_findings(self, config):
        results = render_all(config)
        assert check(config, results) == []

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_every_artifact_parses(self, config):
        for result in render_all(config):
            ast.parse(result.content, filename=result.path)

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_no_template_syntax_leaks(self, config):
        for result in render_all(config):
            assert "{{" not in result.content
            assert "}}" not in result.content

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_rendering_is_deterministic(self, config):
        first = [r.content for r in render_all(config)]
        second = [r.content for r in render_all(config)]
        assert first == second

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_parallel_matches_serial(self, config):
        assert render_all(config, parallel=True) == render_all(config)

    @pytest.mark.parametrize("config", SUPPORTED, ids=_label)
    def test_port_contract_embedded(self, config):
        by_artifact = {r.artifact: r.content for r in render_all(config)}
        for name in ("serve script", "start script"):
            assert f'os.environ.get("{PORT_ENV_VAR}", {DEFAULT_PORT})' in by_artifact[name]


class TestApplicability:
    """Optional modules and framework-specific artifacts."""

    def test_full_tabular_set(self, scenario_a):
        paths = [r.path for r in render_all(scenario_a)]
        assert paths == [
            "code/serve.py",
            "code/start_server.py",
            "code/model_handler.py",
            "sample_model/train_abalone.py",
            "sample_model/test_inference.py",
            "test/test_model_handler.py",
        ]

    def test_sglang_set(self, sglang_config):
        paths = [r.path for r in render_all(sglang_config)]
        assert paths == ["code/serve.py", "code/start_server.py", "test/test_model_handler.py"]

    def test_toggles_drop_optional_modules(self, make_config):
        config = make_config(include_sample_model=False, include_testing=False)
        paths = [spec.path for spec in applicable_artifacts(config)]
        assert paths == ["code/serve.py", "code/start_server.py", "code/model_handler.py"]

    def test_specs_filter_respects_applicability(self, sglang_config):
        results = render_all(sglang_config, specs=ARTIFACTS)
        assert "code/model_handler.py" not in [r.path for r in results]

    def test_get_artifact(self):
        assert get_artifact("serve script") is SERVE
        assert ARTIFACT_PATHS["serve script"] == "code/serve.py"
        with pytest.raises(KeyError):
            get_artifact("dockerfile")


class TestRender:
    """Single-artifact rendering."""

    def test_text_slots_are_verbatim(self, scenario_a):
        content = render(SERVE, scenario_a).content
        for slot in SERVE.slots:
            if isinstance(slot, Text):
                assert slot.text in content

    def test_serve_axes(self):
        assert SERVE.axes == ("always", "modelServer")

    def test_model_id_rendered(self, make_config):
        config = make_config(modelServer="sglang", framework="sglang", model="Qwen/Qwen2.5-0.5B-Instruct")
        content = render(SERVE, config).content
        assert 'MODEL_ID = "Qwen/Qwen2.5-0.5B-Instruct"' in content

    def test_training_saves_to_working_directory(self, scenario_a):
        content = render(get_artifact("training script"), scenario_a).content
        docstring = ast.get_docstring(ast.parse(content))
        assert "in the current directory" in docstring
        assert "next to this script" not in docstring
        assert "'./abalone_model." in content
