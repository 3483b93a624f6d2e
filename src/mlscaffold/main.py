# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import sys
from mlscaffold.cli.main import main as cli_main, configure_parser as configure_cli_parser


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description='Scaffold generator for SageMaker model-serving projects.'
    )
    configure_cli_parser(parser)
    args = parser.parse_args(argv)
    cli_main(args)

if __name__ == "__main__":
    main(sys.argv[1:])
