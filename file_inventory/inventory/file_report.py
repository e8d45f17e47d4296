# file_inventory/inventory/file_report.py
from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import List, Optional

from file_inventory.shared.check_input_dir import check_input_dir
from file_inventory.shared.collect_extensions import ExtensionTable, collect_extensions, fmt_elapsed, printable
from file_inventory.shared.config import load_config, section
from file_inventory.shared.errors import ConfigError, InventoryError, TraversalError
from file_inventory.shared.report_extensions import FORMATS, UNITS, build_report, write_report

DEFAULT_OUTPUT = "file-report.tsv"
DEFAULT_PROGRESS_EVERY = 1000
MAX_WARNINGS_SHOWN = 20


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="file-report",
        description="Survey a directory tree: disk usage and file counts per extension, written as a TSV report.",
    )
    ap.add_argument("--input-dir", "--dir", dest="input_dir", default=None, help="Root directory to walk (required).")
    ap.add_argument("--output-file", default=None, help=f"Where to write the report (default: {DEFAULT_OUTPUT}).")
    ap.add_argument("--format", dest="fmt", choices=FORMATS, default=None,
                    help="full: header + 4 columns + totals (default); legacy: extension + size only.")
    ap.add_argument("--units", choices=UNITS, default=None, help="Human-readable size units (default: decimal).")
    ap.add_argument("--progress-every", type=int, default=None,
                    help=f"Print a PROGRESS line every N files (default: {DEFAULT_PROGRESS_EVERY}, 0 = off).")
    ap.add_argument("--best-effort", action="store_true", default=None,
                    help="Write the report even if some directories could not be read.")
    ap.add_argument("--config", default=None, help="Optional YAML config; values under `inventory:` are defaults.")
    return ap


def _resolve(args: argparse.Namespace) -> dict:
    """Merge CLI flags over the `inventory:` config section over built-in defaults."""
    inv = section(load_config(args.config), "inventory") if args.config else {}

    def pick(cli_value, key, default):
        if cli_value is not None:
            return cli_value
        return inv.get(key, default)

    opts = {
        "input_dir": pick(args.input_dir, "input_dir", None),
        "output_file": pick(args.output_file, "output_file", DEFAULT_OUTPUT),
        "fmt": pick(args.fmt, "format", "full"),
        "units": pick(args.units, "units", "decimal"),
        "progress_every": pick(args.progress_every, "progress_every", DEFAULT_PROGRESS_EVERY),
        "best_effort": pick(args.best_effort, "best_effort", False),
    }

    if not opts["input_dir"]:
        raise ConfigError("Missing input directory: pass --input-dir or set `inventory.input_dir` in --config.")
    if opts["fmt"] not in FORMATS:
        raise ConfigError(f"Unknown format {opts['fmt']!r} (expected one of {FORMATS})")
    if opts["units"] not in UNITS:
        raise ConfigError(f"Unknown units {opts['units']!r} (expected one of {UNITS})")
    # YAML bools are ints too, and a quoted "false" is a non-empty string
    pe = opts["progress_every"]
    if isinstance(pe, bool) or not isinstance(pe, int) or pe < 0:
        raise ConfigError(f"progress_every must be a non-negative integer, got {pe!r}")
    if not isinstance(opts["best_effort"], bool):
        raise ConfigError(f"best_effort must be true or false, got {opts['best_effort']!r}")
    return opts


def run(opts: dict) -> int:
    t0 = time.time()
    root = check_input_dir(opts["input_dir"])
    out = Path(opts["output_file"])

    print(f"[INFO] Walking: {printable(root)}", flush=True)
    table = ExtensionTable()
    result = collect_extensions(root, progress_every=opts["progress_every"], table=table)

    for issue in result.issues[:MAX_WARNINGS_SHOWN]:
        kind = "unreadable directory" if issue.structural else "skipped entry"
        print(f"[WARN] {kind}: {printable(issue.path)} ({printable(issue.error)})", flush=True)
    if len(result.issues) > MAX_WARNINGS_SHOWN:
        print(f"[WARN] ... {len(result.issues) - MAX_WARNINGS_SHOWN} more traversal issues", flush=True)

    structural = result.structural_issues
    if structural and not opts["best_effort"]:
        first = structural[0]
        raise TraversalError(first.path, first.error)

    report = build_report(table, units=opts["units"])
    write_report(report, out, fmt=opts["fmt"])

    _, total_human, total_count, total_bytes = report.totals
    print(
        f"[INFO] {len(report.rows)} extensions, {total_count} files, {total_human} ({total_bytes} bytes)"
        f" | {len(report.excluded)} zero-size extensions omitted",
        flush=True,
    )
    if result.issues:
        print(f"[WARN] Report is incomplete: {len(result.issues)} traversal issues (first: {printable(result.first_error.path)})", flush=True)
    print(f"[OK] wrote file report -> {printable(out)} (elapsed {fmt_elapsed(time.time() - t0)})", flush=True)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        return run(_resolve(args))
    except InventoryError as e:
        print(f"[ERROR] {printable(e)}", flush=True)
        return e.exit_code
    except OSError as e:
        # stat errors from the input check other than "missing"
        print(f"[ERROR] Cannot access input directory: {printable(e)}", flush=True)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
