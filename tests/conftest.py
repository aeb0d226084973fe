import sqlite3
from collections.abc import Callable
from pathlib import Path

import pytest

from builders import PageLayout, build_file

ROW_COUNT = 1000


@pytest.fixture
def write_db(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a synthetic database file built from page layouts."""

    def _write(pages: dict[int, PageLayout], name: str = "test.db", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_file(pages, **kwargs))
        return path

    return _write


@pytest.fixture
def sqlite_db(tmp_path: Path) -> Path:
    """A real database file with a multi-page table and an index on it."""
    path = tmp_path / "sample.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT, score REAL, data BLOB)")
    conn.executemany(
        "INSERT INTO items VALUES (?, ?, ?, ?)",
        [(i, f"item-{i:04d}", i + 0.5, bytes([i % 256]) * 3) for i in range(1, ROW_COUNT + 1)],
    )
    conn.execute("CREATE INDEX items_name ON items(name)")
    conn.commit()
    conn.close()
    return path


def root_pages(path: Path) -> dict[str, int]:
    conn = sqlite3.connect(path)
    try:
        return dict(conn.execute("SELECT name, rootpage FROM sqlite_master"))
    finally:
        conn.close()
