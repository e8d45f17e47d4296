from __future__ import annotations

from pathlib import Path

import pytest


def _write_tree(root: Path, files: dict) -> Path:
    """files: relative path -> size in bytes (content is that many 'x')."""
    for rel, size in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"x" * size)
    return root


@pytest.fixture
def make_tree(tmp_path: Path):
    def _make(files: dict, name: str = "collection") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        return _write_tree(root, files)

    return _make


@pytest.fixture
def example_tree(make_tree):
    return make_tree({"a.txt": 10, "b.TXT": 20, "c": 0})


@pytest.fixture
def nested_tree(make_tree):
    return make_tree(
        {
            "README": 12,
            ".gitignore": 3,
            "docs/REPORT.PDF": 400,
            "docs/report.pdf": 100,
            "docs/notes.txt": 50,
            "docs/drafts/old.Doc": 70,
            "images/scan_001.tif": 1000,
            "images/scan_002.TIF": 1000,
            "images/thumbs/scan_001.jpg": 30,
            "images/thumbs/empty.jpg": 0,
            "data/archive.tar.gz": 250,
            "data/empty.log": 0,
            "data/empty2.log": 0,
            "deep/a/b/c/d/e/leaf.xml": 9,
        }
    )
