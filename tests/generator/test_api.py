# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""
Integration tests for the generation API.
"""

import pytest
import yaml

from mlscaffold.generator import enumerate_variants, generate_scaffold
from mlscaffold.generator.errors import CompatibilityError, ConfigurationError, WriteConflict
from mlscaffold.generator.utils.writers import CONFIG_RECORD

UNSUPPORTED = [(config, violations) for config, violations in enumerate_variants() if violations]


def _files_under(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*") if p.is_file())


class TestGenerateAPI:
    """End-to-end generation through the public API."""

    def test_from_runtime_in_memory(self):
        bundle = generate_scaffold.from_runtime({"modelServer": "fastapi", "framework": "xgboost"})
        assert bundle.config.model_format == "json"
        assert bundle.written == []
        assert set(bundle.by_path) == {
            "code/serve.py",
            "code/start_server.py",
            "code/model_handler.py",
            "sample_model/train_abalone.py",
            "sample_model/test_inference.py",
            "test/test_model_handler.py",
        }
        assert bundle.by_artifact["serve script"].path == "code/serve.py"

    def test_from_runtime_writes_files(self, tmp_path):
        bundle = generate_scaffold.from_runtime({}, save_dir=str(tmp_path))
        assert _files_under(tmp_path) == [
            "code/model_handler.py",
            "code/serve.py",
            "code/start_server.py",
            "sample_model/test_inference.py",
            "sample_model/train_abalone.py",
            "test/test_model_handler.py",
        ]
        assert len(bundle.written) == 6

    def test_from_file_with_overrides(self, tmp_path):
        cfg = tmp_path / "scaffold.yaml"
        cfg.write_text("modelServer: fastapi\nframework: tensorflow\nmodelFormat: keras\ninclude_testing: false\n")
        bundle = generate_scaffold.from_file(str(cfg), overrides={"modelFormat": "h5"})
        assert bundle.config.model_format == "h5"
        assert "test/test_model_handler.py" not in bundle.by_path

    def test_save_config_record_reproduces_variant(self, tmp_path):
        out = tmp_path / "out"
        generate_scaffold.from_runtime(
            {"modelServer": "sglang", "framework": "sglang", "model": "Qwen/Qwen2.5-7B-Instruct"},
            save_dir=str(out),
            save_config=True,
        )
        record = yaml.safe_load((out / CONFIG_RECORD).read_text())
        assert record["model"] == "Qwen/Qwen2.5-7B-Instruct"
        replay = generate_scaffold.from_file(str(out / CONFIG_RECORD))
        assert replay.config == generate_scaffold.from_runtime(record).config

    def test_parallel_matches_serial(self):
        cfg = {"modelServer": "flask", "framework": "tensorflow", "modelFormat": "SavedModel"}
        assert generate_scaffold.from_runtime(cfg, parallel=True).results == generate_scaffold.from_runtime(cfg).results

    def test_rerun_without_overwrite_conflicts(self, tmp_path):
        generate_scaffold.from_runtime({}, save_dir=str(tmp_path))
        serve = tmp_path / "code" / "serve.py"
        serve.write_text("# edited by hand\n")
        with pytest.raises(WriteConflict) as excinfo:
            generate_scaffold.from_runtime({}, save_dir=str(tmp_path))
        assert len(excinfo.value.paths) == 6
        assert serve.read_text() == "# edited by hand\n"

    def test_rerun_with_overwrite_is_idempotent(self, tmp_path):
        generate_scaffold.from_runtime({}, save_dir=str(tmp_path))
        before = {p: (tmp_path / p).read_bytes() for p in _files_under(tmp_path)}
        generate_scaffold.from_runtime({}, save_dir=str(tmp_path), overwrite=True)
        after = {p: (tmp_path / p).read_bytes() for p in _files_under(tmp_path)}
        assert before == after

    def test_failed_overwrite_leaves_previous_scaffold(self, tmp_path):
        generate_scaffold.from_runtime({}, save_dir=str(tmp_path))
        serve = tmp_path / "code" / "serve.py"
        serve.write_text("# customized\n")
        before = {p: (tmp_path / p).read_bytes() for p in _files_under(tmp_path)}
        harness = tmp_path / "test" / "test_model_handler.py"
        harness.unlink()
        harness.mkdir()
        del before["test/test_model_handler.py"]
        with pytest.raises(OSError):
            generate_scaffold.from_runtime({"modelServer": "fastapi"}, save_dir=str(tmp_path), overwrite=True)
        assert {p: (tmp_path / p).read_bytes() for p in _files_under(tmp_path)} == before

    def test_scenario_b_emits_nothing(self, tmp_path):
        with pytest.raises(CompatibilityError) as excinfo:
            generate_scaffold.from_runtime(
                {"modelServer": "sglang", "framework": "xgboost", "modelFormat": "json"},
                save_dir=str(tmp_path),
            )
        assert excinfo.value.violations == ["sglang-server-iff-sglang-framework"]
        assert _files_under(tmp_path) == []

    def test_configuration_error_emits_nothing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            generate_scaffold.from_runtime({"framework": "pytorch"}, save_dir=str(tmp_path))
        assert _files_under(tmp_path) == []

    @pytest.mark.parametrize("config,violations", UNSUPPORTED, ids=lambda v: v.label() if hasattr(v, "label") else None)
    def test_every_unsupported_variant_is_rejected(self, config, violations):
        with pytest.raises(CompatibilityError) as excinfo:
            generate_scaffold.from_config(config)
        assert excinfo.value.violations == violations
