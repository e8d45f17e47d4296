# file_inventory/shared/report_extensions.py
from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

import humanize

from file_inventory.shared.collect_extensions import ExtensionStat, ExtensionTable
from file_inventory.shared.errors import OutputIOError

HEADER = ["Extension", "Size", "Count", "Size In Bytes"]
TOTALS_LABEL = "totals"
FORMATS = ("full", "legacy")
UNITS = ("decimal", "binary")

Row = Tuple[str, str, int, int]


def human_size(n: int, units: str = "decimal") -> str:
    if units not in UNITS:
        raise ValueError(f"Unknown units {units!r}; expected one of {UNITS}")
    return humanize.naturalsize(n, binary=(units == "binary"))


def rank_extensions(table: ExtensionTable) -> List[ExtensionStat]:
    # size descending, then extension name ascending for equal sizes
    return sorted(table.stats(), key=lambda s: (-s.size, s.name))


@dataclass
class Report:
    rows: List[Row]
    totals: Row
    excluded: List[ExtensionStat]


def build_report(table: ExtensionTable, units: str = "decimal") -> Report:
    """
    Rank the table and drop zero-size aggregates.

    The totals row sums exactly the rows that were kept, so an extension made
    only of empty files contributes neither bytes nor files to it.
    """
    rows: List[Row] = []
    excluded: List[ExtensionStat] = []
    total_size = 0
    total_count = 0

    for st in rank_extensions(table):
        if st.size <= 0:
            excluded.append(st)
            continue
        rows.append((st.name, human_size(st.size, units), st.count, st.size))
        total_size += st.size
        total_count += st.count

    totals = (TOTALS_LABEL, human_size(total_size, units), total_count, total_size)
    return Report(rows=rows, totals=totals, excluded=excluded)


def _field(value) -> str:
    # fields are written verbatim; only tab and line breaks would split a row
    return str(value).replace("\t", "\\t").replace("\n", "\\n").replace("\r", "\\r")


def _report_lines(report: Report, fmt: str) -> List[list]:
    if fmt == "legacy":
        return [[name, human] for name, human, _, _ in report.rows]
    out: List[list] = [list(HEADER)]
    out.extend(list(r) for r in report.rows)
    out.append(list(report.totals))
    return out


def write_report(report: Report, out_path, fmt: str = "full") -> Path:
    """
    Write the report in one go: temp file next to the target, then rename.

    Any OSError becomes OutputIOError and no partial report is left behind.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown report format {fmt!r}; expected one of {FORMATS}")

    out = Path(out_path)
    tmp_name = None
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{out.name}.", suffix=".tmp", dir=out.parent)
        # surrogateescape: undecodable filename bytes go back out unchanged
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            for row in _report_lines(report, fmt):
                f.write("\t".join(_field(x) for x in row) + "\n")
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, out)
        tmp_name = None
    except OSError as e:
        raise OutputIOError(out, e) from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass

    return out
