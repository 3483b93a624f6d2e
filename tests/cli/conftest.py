# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse

import pytest

from mlscaffold.cli.main import configure_parser as configure_cli_parser


@pytest.fixture
def cli_parser():
    """Pre-configured CLI parser for testing."""
    parser = argparse.ArgumentParser()
    configure_cli_parser(parser)
    return parser


@pytest.fixture
def scaffold_yaml(tmp_path):
    """Factory writing a YAML configuration file and returning its path."""
    def _write(text, name="scaffold.yaml"):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write
