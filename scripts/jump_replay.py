#!/usr/bin/env python3
"""Replay a goto-char navigation headlessly over text files.

Types a search string (and optionally a label) into the navigation inputs,
then reports where the cursor landed.

Usage:
    python3 scripts/jump_replay.py notes.txt:1-40 src/app.py:10-60 \
      --search "cat" --label b --trace trace.jsonl --verbose

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path

from gotochar.config import JumpConfig, load_config
from gotochar.io_utils import dump_json, save_jsonl
from gotochar.replay import StageScript, load_workspace, run_replay

log = logging.getLogger("jump_replay")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replay a goto-char navigation over text files."
    )
    parser.add_argument(
        "views", nargs="+",
        help="Files to open, each optionally followed by visible lines: path[:1-40,61-80]",
    )
    parser.add_argument("--search", required=True, help="Search text typed into stage 1")
    parser.add_argument(
        "--search-end", choices=("wait", "accept", "dismiss"), default="wait",
        help="How the search input ends after typing (default: wait for the debounce)",
    )
    parser.add_argument("--label", default=None, help="Label typed into stage 2")
    parser.add_argument(
        "--label-end", choices=("wait", "accept", "dismiss"), default="accept",
        help="How the label input ends after typing (default: accept)",
    )
    parser.add_argument(
        "--key-delay-ms", type=int, default=0,
        help="Delay between scripted keystrokes in milliseconds (default: 0)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Settings JSON file")
    parser.add_argument(
        "--timeout-ms", type=int, default=None,
        help="Override the search debounce window",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Threads used to scan views; only faster on free-threaded Python (default: 1)",
    )
    parser.add_argument(
        "--trace", type=Path, default=None,
        help="Write the decoration trace as JSONL",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def _resolve_config(args: argparse.Namespace) -> JumpConfig:
    config = load_config(args.config)
    if args.timeout_ms is not None and args.timeout_ms > 0:
        config = replace(config, timeout_ms=args.timeout_ms)
    return config


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        workspace = load_workspace(args.views)
        config = _resolve_config(args)
    except (OSError, ValueError) as exc:
        log.error("%s", exc)
        return 2

    scripts = [StageScript(args.search, args.search_end)]
    if args.label is not None:
        scripts.append(StageScript(args.label, args.label_end))

    report = asyncio.run(run_replay(
        workspace,
        scripts,
        config,
        key_delay_s=args.key_delay_ms / 1000.0,
        max_workers=args.workers,
    ))

    if args.trace is not None:
        save_jsonl(report.trace, args.trace)
        print(f"Wrote {len(report.trace)} trace events to {args.trace}", file=sys.stderr)

    dump_json(report.to_dict())
    return 0 if report.result.jumped else 1


if __name__ == "__main__":
    sys.exit(main())
