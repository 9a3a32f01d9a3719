from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace

from tablelog.core.errors import TableLogError
from tablelog.io.config import LogSettings
from tablelog.io.errors import LogIoError
from tablelog.io.inspect import active_files_frame, tombstones_frame
from tablelog.io.table import Table


def _settings(args: argparse.Namespace) -> LogSettings:
    """Settings from env/TOML, with --table-root taking precedence."""
    s = LogSettings.load(args.config)
    if args.table_root:
        s = replace(s, table_root=args.table_root)
    return s


def _cmd_versions(args: argparse.Namespace) -> int:
    table = Table(_settings(args))
    versions = table.store.list_versions()
    checkpoint = table.store.latest_checkpoint()
    for v in versions:
        marker = "  (checkpoint)" if v == checkpoint else ""
        print(f"{v}{marker}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    table = Table(_settings(args))
    state = table.snapshot(args.version)
    metadata = state.require_metadata()
    print(f"version:   {state.version}")
    print(f"protocol:  {state.require_protocol().simple_string}")
    print(f"table id:  {metadata.id}")
    print(f"partition: {', '.join(metadata.partition_columns) or '-'}")
    print(f"files:     {state.num_files} ({state.size_in_bytes} bytes)")
    print(f"tombstones: {len(state.tombstones)}")
    print(active_files_frame(state).head(args.n))
    if args.tombstones:
        print(tombstones_frame(state).head(args.n))
    return 0


def _cmd_checkpoint(args: argparse.Namespace) -> int:
    table = Table(_settings(args))
    version = table.checkpoint(args.version, now_ms=args.now_ms)
    print(f"checkpoint written at version {version}")
    return 0


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tablelog", description="Transaction log inspection utilities.")
    p.add_argument("--table-root", type=str, default="", help="Table directory (overrides config).")
    p.add_argument("--config", type=str, default=None, help="Explicit TOML settings file.")
    p.add_argument("--log-level", type=str, default="WARNING", help="Python logging level.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("versions", help="List committed versions.")

    show = sub.add_parser("show", help="Replay the log and summarize a version.")
    show.add_argument("--version", type=int, default=None, help="Version (default: latest).")
    show.add_argument("--n", type=int, default=10, help="Rows of active files to display.")
    show.add_argument("--tombstones", action="store_true", help="Also list tombstones.")

    cp = sub.add_parser("checkpoint", help="Write a checkpoint.")
    cp.add_argument("--version", type=int, default=None, help="Version (default: latest).")
    cp.add_argument(
        "--now-ms",
        type=int,
        default=None,
        help="Current epoch ms; tombstones past the retention window are dropped.",
    )
    return p


_COMMANDS = {
    "versions": _cmd_versions,
    "show": _cmd_show,
    "checkpoint": _cmd_checkpoint,
}


def main(argv: list[str] | None = None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())
    try:
        return _COMMANDS[args.cmd](args)
    except (TableLogError, LogIoError) as exc:
        print(f"[ERROR] {type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
