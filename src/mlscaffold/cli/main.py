# SPDX-FileCopyrightText: Copyright (c) 2025 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import argparse
import logging

from mlscaffold import __version__
from mlscaffold.cli.report import log_bundle_summary, variant_table
from mlscaffold.generator.api import enumerate_variants, generate_scaffold
from mlscaffold.generator.cli_args import add_axis_cli, build_overrides
from mlscaffold.generator.errors import ScaffoldError
from mlscaffold.generator.types import ScaffoldBundle


logger = logging.getLogger(__name__)


def _build_common_cli_parser() -> argparse.ArgumentParser:
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument("--debug", action="store_true", help="Enable debug mode.")
    return common_parser


def _add_generate_arguments(parser):
    parser.add_argument("--config", type=str, default=None, help="YAML file with axis values. Flags given on the command line override it.")
    parser.add_argument("--output_dir", type=str, default=None, help="Directory to write the scaffold to. Required unless --dry_run is set.")
    parser.add_argument("--overwrite", action="store_true", help="Replace files that already exist under --output_dir.")
    parser.add_argument("--dry_run", action="store_true", help="Render and check the artifacts without writing them.")
    parser.add_argument("--save_config", action="store_true", help="Also write the normalized configuration next to the scaffold.")
    parser.add_argument("--parallel", action="store_true", help="Render artifacts concurrently.")
    add_axis_cli(parser)


def configure_parser(parser):
    common_cli_parser = _build_common_cli_parser()
    subparsers = parser.add_subparsers(dest="mode", required=True)

    generate_parser = subparsers.add_parser("generate", parents=[common_cli_parser], help="Generate a model-serving scaffold.")
    _add_generate_arguments(generate_parser)

    variants_parser = subparsers.add_parser("variants", parents=[common_cli_parser], help="List the supported variants.")
    variants_parser.add_argument("--all", action="store_true", help="Include unsupported combinations and the rules they violate.")


def _log_failure(exc: ScaffoldError) -> None:
    logger.error("Generation failed: %s", exc.code.name)
    for problem in exc.problems():
        logger.error("  %s", problem)


def _run_generate(args) -> ScaffoldBundle:
    if not args.dry_run and not args.output_dir:
        logger.error("--output_dir is required unless --dry_run is set")
        raise SystemExit(1)

    overrides = build_overrides(args)
    kwargs = dict(
        overrides=overrides,
        save_dir=None if args.dry_run else args.output_dir,
        overwrite=args.overwrite,
        parallel=args.parallel,
        save_config=args.save_config,
    )
    try:
        if args.config:
            bundle = generate_scaffold.from_file(args.config, **kwargs)
        else:
            bundle = generate_scaffold.from_runtime({}, **kwargs)
    except ScaffoldError as exc:
        _log_failure(exc)
        raise SystemExit(1) from exc
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        raise SystemExit(1) from exc
    except OSError as exc:
        logger.error("Could not write scaffold: %s", exc)
        raise SystemExit(1) from exc

    log_bundle_summary(bundle, args.output_dir)
    return bundle


def _run_variants(args) -> None:
    variants = enumerate_variants()
    supported = sum(1 for _, violations in variants if not violations)
    print(variant_table(variants, include_unsupported=args.all))
    logger.info("%d supported variants out of %d combinations", supported, len(variants))


def main(args):
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(levelname)s %(asctime)s %(filename)s:%(lineno)d] %(message)s')

    logger.info(f"Loading mlscaffold version: {__version__}")

    if args.mode == "generate":
        _run_generate(args)
    elif args.mode == "variants":
        _run_variants(args)
    else:
        raise SystemExit(f"Unsupported mode: {args.mode}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Scaffold generator for SageMaker model-serving projects")
    configure_parser(parser)
    args = parser.parse_args()
    main(args)
