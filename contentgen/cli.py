from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from . import log
from .config import DEFAULT_CONFIG, PipelineConfig, load_config
from .errors import ConfigError, SourceNotFoundError
from .pipeline import Pipeline, StageResult


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_str(key: str) -> Optional[str]:
        value = config.get(key)
        return None if value is None else str(value)

    parser = argparse.ArgumentParser(
        prog="contentgen",
        description="Publish markdown drafts, build JSON content records and indexes.",
    )
    parser.add_argument("--config", default=config_path, help="Path to config file (TOML/YAML/JSON).")
    parser.add_argument(
        "--verbose",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Log every processed and skipped file.",
    )
    parser.add_argument("-d", "--drafts-dir", default=cfg_str("drafts_dir"), help="Drafts location.")
    parser.add_argument("-p", "--publish-dir", default=cfg_str("publish_dir"), help="Publish location.")
    parser.add_argument("-c", "--content-dir", default=cfg_str("content_dir"), help="Content location.")
    parser.add_argument("-i", "--indexes-dir", default=cfg_str("indexes_dir"), help="Indexes location.")

    commands = parser.add_subparsers(dest="command")
    publish = commands.add_parser("publish", help="Publish all drafts or the given drafts.")
    publish.add_argument("files", nargs="*", help="Draft files, relative to cwd or the drafts dir.")

    build = commands.add_parser("build", help="Build everything that has already been published.")
    build.add_argument("files", nargs="*", help="Published files to build instead of all of them.")
    build.add_argument("-f", "--force", action="store_true", help="Rebuild unchanged content.")

    run = commands.add_parser("run", help="Publish all drafts, then build all content and indexes.")
    run.add_argument("-f", "--force", action="store_true", help="Rebuild unchanged content.")
    return parser


def make_config(args: argparse.Namespace, file_config: dict) -> PipelineConfig:
    values = dict(file_config)
    for key in ("drafts_dir", "publish_dir", "content_dir", "indexes_dir", "verbose"):
        value = getattr(args, key, None)
        if value is not None:
            values[key] = value
    return PipelineConfig.from_mapping(values)


async def dispatch(args: argparse.Namespace, pipeline: Pipeline) -> bool:
    if args.command == "publish":
        if args.files:
            result = await pipeline.publish_named(args.files)
        else:
            log.info("publishing all", style="green")
            result = await pipeline.publish_all()
        return result.ok
    if args.command == "build":
        if args.files:
            result = await pipeline.build_named(args.files, args.force)
            return result.ok
        log.info("start build", style="green")
        result, _ = await pipeline.build(args.force)
        return result.ok
    log.info("start publish and build", style="green")
    report = await pipeline.run(args.force)
    results: Sequence[StageResult] = (report.published, report.built)
    return all(item.ok for item in results)


def main(argv: Optional[Sequence[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=DEFAULT_CONFIG)
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        file_config = load_config(Path(pre_args.config))
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    parser = build_parser(file_config, pre_args.config)
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    start = time.perf_counter()
    try:
        pipeline = Pipeline(make_config(args, file_config))
        ok = asyncio.run(dispatch(args, pipeline))
    except (ConfigError, SourceNotFoundError) as exc:
        log.error(str(exc))
        sys.exit(1)
    elapsed = time.perf_counter() - start
    log.info(f"done in {elapsed:.2f}s", style="green")
    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
