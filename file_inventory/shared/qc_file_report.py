# file_inventory/shared/qc_file_report.py
from __future__ import annotations

import argparse
import csv
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from file_inventory.shared.report_extensions import HEADER, TOTALS_LABEL


@dataclass
class QcResult:
    report: Path
    rows: int = 0
    checks: List[Tuple[str, bool]] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return bool(self.checks) and all(ok for _, ok in self.checks)


def _read_report(report_tsv: Path) -> pd.DataFrame:
    # keep_default_na=False: the extensionless row is an empty string, not NaN
    # fields are raw text, quotes included; undecodable filename bytes stay escaped
    return pd.read_csv(
        report_tsv,
        sep="\t",
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
        encoding="utf-8",
        encoding_errors="surrogateescape",
    )


def qc_file_report(report_tsv) -> QcResult:
    """Sanity checks over a full-format extension report."""
    report_tsv = Path(report_tsv)
    res = QcResult(report=report_tsv)

    df = _read_report(report_tsv)
    res.rows = int(df.shape[0])

    header_ok = list(df.columns) == HEADER
    res.checks.append(("header", header_ok))
    if not header_ok:
        res.notes.append(f"columns={list(df.columns)} expected={HEADER}")
        return res

    if df.empty:
        res.checks.append(("totals_row_last", False))
        res.notes.append("report has no rows")
        return res

    last = df.iloc[-1]
    totals_last = last["Extension"] == TOTALS_LABEL
    res.checks.append(("totals_row_last", totals_last))
    if not totals_last:
        res.notes.append(f"last row extension={last['Extension']!r}")
        return res

    detail = df.iloc[:-1].copy()
    detail["Count"] = pd.to_numeric(detail["Count"], errors="coerce")
    detail["Size In Bytes"] = pd.to_numeric(detail["Size In Bytes"], errors="coerce")

    numeric_ok = not detail[["Count", "Size In Bytes"]].isna().any().any()
    res.checks.append(("numeric_columns", numeric_ok))
    if not numeric_ok:
        res.notes.append("non-numeric Count or Size In Bytes in detail rows")
        return res

    sizes = detail["Size In Bytes"].astype("int64")
    counts = detail["Count"].astype("int64")

    res.checks.append(("sizes_non_increasing", bool(sizes.is_monotonic_decreasing)))
    res.checks.append(("no_zero_size_rows", bool((sizes > 0).all())))
    res.checks.append(("no_duplicate_extensions", not bool(detail["Extension"].duplicated().any())))

    total_bytes = int(last["Size In Bytes"])
    total_count = int(last["Count"])
    res.checks.append(("totals_bytes_match", total_bytes == int(sizes.sum())))
    res.checks.append(("totals_count_match", total_count == int(counts.sum())))

    res.notes.append(f"extensions={len(detail)} files={total_count} bytes={total_bytes}")
    if len(detail):
        top = detail.iloc[0]
        res.notes.append(f"largest={top['Extension']!r} ({top['Size']}, {int(top['Count'])} files)")
    return res


def main() -> int:
    ap = argparse.ArgumentParser(description="QC checks for an extension survey report (TSV).")
    ap.add_argument("--report", required=True, help="Report TSV written by file-report (full format).")
    ap.add_argument("--out_txt", required=True, help="Where to write the QC summary (.txt).")
    args = ap.parse_args()

    t0 = time.time()
    report = Path(args.report)
    out_txt = Path(args.out_txt)
    out_txt.parent.mkdir(parents=True, exist_ok=True)

    lines: list[str] = []
    lines.append(f"REPORT: {report}")
    lines.append(f"EXISTS: {report.exists()}")

    if not report.exists():
        out_txt.write_text("\n".join(lines) + "\n", encoding="utf-8")
        print(f"[ERROR] Missing report. Wrote QC summary: {out_txt}")
        return 2

    res = qc_file_report(report)
    lines.append(f"ROWS: {res.rows}")
    lines.append("")
    lines.append("CHECKS:")
    for name, ok in res.checks:
        lines.append(f"  PASS {name}: {ok}")
    lines.append("")
    for note in res.notes:
        lines.append(f"NOTE: {note}")
    lines.append(f"ELAPSED_SEC: {time.time() - t0:.2f}")

    out_txt.write_text("\n".join(lines) + "\n", encoding="utf-8")
    if not res.passed:
        failed = [name for name, ok in res.checks if not ok]
        print(f"[ERROR] QC failed ({', '.join(failed)}). Summary -> {out_txt}")
        return 2

    print(f"[OK] Wrote report QC -> {out_txt}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
