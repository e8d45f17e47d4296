from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
SURVEY = REPO_ROOT / "run" / "archive" / "00_survey_collections.py"
QC = REPO_ROOT / "run" / "archive" / "01_qc_survey_reports.py"


def _run(script: Path, cfg: Path) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH", "")]))
    return subprocess.run(
        [sys.executable, str(script), "--config", str(cfg)],
        capture_output=True,
        text=True,
        env=env,
        cwd=REPO_ROOT,
        timeout=120,
    )


@pytest.fixture
def survey_cfg(make_tree, tmp_path: Path):
    a = make_tree({"a.txt": 10, "b.TXT": 20, "c": 0}, name="coll_a")
    b = make_tree({"img/x.tif": 500, "img/y.jpg": 50}, name="coll_b")
    cfg = tmp_path / "survey.yaml"
    cfg.write_text(
        "paths:\n"
        f"  out_reports: {tmp_path / 'reports'}\n"
        f"  out_logs: {tmp_path / 'logs'}\n"
        "inventory:\n"
        "  progress_every: 1\n"
        "collections:\n"
        f"  - name: coll_a\n    input_dir: {a}\n"
        f"  - name: coll_b\n    input_dir: {b}\n",
        encoding="utf-8",
    )
    return cfg


def test_survey_then_qc(survey_cfg: Path, tmp_path: Path):
    p = _run(SURVEY, survey_cfg)
    assert p.returncode == 0, p.stdout + p.stderr
    assert "[OK] Surveyed 2 collections" in p.stdout

    reports = tmp_path / "reports"
    assert (reports / "coll_a.tsv").read_text(encoding="utf-8").splitlines()[-1].endswith("\t2\t30")
    assert (reports / "coll_b.tsv").read_text(encoding="utf-8").splitlines()[1].startswith(".tif\t")

    logs = list((tmp_path / "logs").glob("00_survey_collections_*.log"))
    assert len(logs) == 1
    log_text = logs[0].read_text(encoding="utf-8")
    assert log_text.count("COMMAND:") == 2
    assert "PROGRESS" in log_text

    q = _run(QC, survey_cfg)
    assert q.returncode == 0, q.stdout + q.stderr
    assert "[OK] QC passed for 2 reports" in q.stdout


def test_survey_keeps_going_after_a_bad_collection(make_tree, tmp_path: Path):
    good = make_tree({"a.txt": 3}, name="good")
    cfg = tmp_path / "survey.yaml"
    cfg.write_text(
        "paths:\n"
        f"  out_reports: {tmp_path / 'reports'}\n"
        f"  out_logs: {tmp_path / 'logs'}\n"
        "collections:\n"
        f"  - name: missing\n    input_dir: {tmp_path / 'does_not_exist'}\n"
        f"  - name: good\n    input_dir: {good}\n",
        encoding="utf-8",
    )
    p = _run(SURVEY, cfg)
    assert p.returncode == 1
    assert "1/2 collections failed: missing" in p.stdout
    assert (tmp_path / "reports" / "good.tsv").exists()
    assert not (tmp_path / "reports" / "missing.tsv").exists()


def test_dry_run_writes_nothing(survey_cfg: Path, tmp_path: Path):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH", "")]))
    p = subprocess.run(
        [sys.executable, str(SURVEY), "--config", str(survey_cfg), "--dry_run"],
        capture_output=True,
        text=True,
        env=env,
        cwd=REPO_ROOT,
        timeout=60,
    )
    assert p.returncode == 0
    assert "coll_a" in p.stdout and "coll_b" in p.stdout
    assert not (tmp_path / "reports").exists()
    assert not (tmp_path / "logs").exists()
