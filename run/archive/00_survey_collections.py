# run/archive/00_survey_collections.py
from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from file_inventory.shared.config import load_config, section, timestamp


def _ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


def _collections(cfg: dict) -> list[dict]:
    items = cfg.get("collections") or []
    out: list[dict] = []
    for i, c in enumerate(items):
        if not isinstance(c, dict) or not c.get("name") or not c.get("input_dir"):
            raise SystemExit(f"[ERROR] collections[{i}] needs `name` and `input_dir`. Got: {c!r}")
        out.append({"name": str(c["name"]), "input_dir": str(c["input_dir"])})
    if not out:
        raise SystemExit("[ERROR] Config has no `collections:` to survey.")
    return out


def _report_cmd(input_dir: str, out_tsv: Path, inv: dict) -> list[str]:
    cmd = [
        sys.executable, "-m", "file_inventory.inventory.file_report",
        "--input-dir", input_dir,
        "--output-file", str(out_tsv),
        "--format", str(inv.get("format", "full")),
        "--units", str(inv.get("units", "decimal")),
        "--progress-every", str(inv.get("progress_every", 1000)),
    ]
    if inv.get("best_effort", False) is True:
        cmd.append("--best-effort")
    return cmd


def _run_with_filtered_live_output(cmd, lf) -> int:
    """
    - Appends ALL subprocess output to the open log file.
    - Shows only progress + key lines in terminal.
    """
    lf.write("COMMAND:\n")
    lf.write(" ".join(map(str, cmd)) + "\n\n")
    lf.flush()

    p = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    )

    last_progress_printed = False

    assert p.stdout is not None
    for line in p.stdout:
        lf.write(line)
        lf.flush()

        s = line.rstrip("\n")
        if s.startswith("PROGRESS "):
            print("\r" + s, end="", flush=True)
            last_progress_printed = True
        elif s.startswith(("[INFO]", "[OK]", "[WARN]", "[ERROR]")):
            if last_progress_printed:
                print("")
                last_progress_printed = False
            print(s, flush=True)

    rc = p.wait()
    if last_progress_printed:
        print("")
    return rc


def main() -> int:
    ap = argparse.ArgumentParser(description="Survey every configured collection: one extension report per collection.")
    ap.add_argument("--config", default="configs/archive_survey.yaml")
    ap.add_argument("--dry_run", action="store_true")
    args = ap.parse_args()

    cfg = load_config(Path(args.config))
    paths = section(cfg, "paths")
    inv = section(cfg, "inventory")
    collections = _collections(cfg)

    out_reports = Path(paths.get("out_reports", "outputs/reports"))
    out_logs = Path(paths.get("out_logs", "outputs/logs"))

    if args.dry_run:
        print("[DRY RUN] Collection survey preview")
        print(f"  Config: {args.config}")
        print(f"  Reports dir: {out_reports}")
        print(f"  Logs dir: {out_logs}")
        for c in collections:
            print(f"  - {c['name']}: {c['input_dir']} -> {out_reports / (c['name'] + '.tsv')}")
        print("\n[DRY RUN] Nothing was walked or written.")
        return 0

    _ensure_dir(out_reports)
    _ensure_dir(out_logs)
    log = out_logs / f"00_survey_collections_{timestamp(cfg)}.log"

    first_rc = 0
    failed: list[str] = []
    with log.open("w", encoding="utf-8", newline="\n") as lf:
        for c in collections:
            out_tsv = out_reports / f"{c['name']}.tsv"
            print(f"[INFO] Collection {c['name']}: {c['input_dir']}", flush=True)

            rc = _run_with_filtered_live_output(_report_cmd(c["input_dir"], out_tsv, inv), lf)
            lf.write(f"\nRC: {rc}\n" + ("-" * 80) + "\n\n")
            lf.flush()

            # keep going so one bad mount does not hide the other reports
            if rc != 0:
                failed.append(c["name"])
                if first_rc == 0:
                    first_rc = rc

    if failed:
        print(f"[ERROR] {len(failed)}/{len(collections)} collections failed: {', '.join(failed)}. See log:\n  {log}", flush=True)
        return first_rc

    print(f"[OK] Surveyed {len(collections)} collections. Log: {log}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
