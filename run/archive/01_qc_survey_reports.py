# run/archive/01_qc_survey_reports.py
from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

from file_inventory.shared.config import load_config, section, timestamp


def main() -> int:
    ap = argparse.ArgumentParser(description="QC every report written by 00_survey_collections.")
    ap.add_argument("--config", default="configs/archive_survey.yaml")
    args = ap.parse_args()

    cfg = load_config(Path(args.config))
    paths = section(cfg, "paths")
    out_reports = Path(paths.get("out_reports", "outputs/reports"))
    out_logs = Path(paths.get("out_logs", "outputs/logs"))
    out_logs.mkdir(parents=True, exist_ok=True)

    if section(cfg, "inventory").get("format", "full") != "full":
        raise SystemExit("[ERROR] QC needs full-format reports (inventory.format: full).")

    names = [str(c["name"]) for c in (cfg.get("collections") or []) if isinstance(c, dict) and c.get("name")]
    if not names:
        raise SystemExit("[ERROR] Config has no `collections:` to check.")

    ts = timestamp(cfg)
    log = out_logs / f"01_qc_survey_reports_{ts}.log"

    failed: list[str] = []
    with log.open("w", encoding="utf-8") as lf:
        for name in names:
            cmd = [
                sys.executable, "-m", "file_inventory.shared.qc_file_report",
                "--report", str(out_reports / f"{name}.tsv"),
                "--out_txt", str(out_logs / f"{name}_report_qc_{ts}.txt"),
            ]
            lf.write("COMMAND:\n" + " ".join(cmd) + "\n\n")
            lf.flush()
            rc = subprocess.run(cmd, stdout=lf, stderr=subprocess.STDOUT).returncode
            lf.write(f"\nRC: {rc}\n" + ("-" * 80) + "\n\n")
            lf.flush()
            if rc != 0:
                failed.append(name)
                print(f"[WARN] QC failed for {name} (rc={rc})", flush=True)

    if failed:
        print(f"[ERROR] QC failed for {len(failed)}/{len(names)} reports. Log: {log}", flush=True)
        return 2

    print(f"[OK] QC passed for {len(names)} reports. Log: {log}", flush=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
