"""Shared fixtures for Ark tests."""

from pathlib import Path

import pytest
from loguru import logger

from ark.dates import snapshot_name
from ark.utils.config import reset_config


@pytest.fixture(autouse=True)
def _fresh_config():
    """Every test reads the environment from scratch."""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _reset_log_sinks():
    """Drop sinks the CLI bound to captured streams."""
    yield
    logger.remove()


@pytest.fixture
def backup_env(tmp_path):
    """Isolated source files and an empty backup directory."""
    data_dir = tmp_path / "data"
    backup_dir = tmp_path / "backups"
    data_dir.mkdir()
    backup_dir.mkdir()

    db_path = data_dir / "xy.db"
    db_path.write_bytes(b"test database content")
    sql_path = data_dir / "xy.sql"
    sql_path.write_text("CREATE TABLE t (id INTEGER);\n")

    return {
        "tmp_path": tmp_path,
        "data_dir": data_dir,
        "backup_dir": backup_dir,
        "db_path": db_path,
        "sql_path": sql_path,
        "sources": [db_path, sql_path],
    }


@pytest.fixture
def make_snapshots():
    """Factory creating placeholder snapshot files for each date."""

    def _make(backup_dir: Path, dates) -> list[Path]:
        paths = []
        for d in dates:
            path = backup_dir / snapshot_name(d)
            path.write_bytes(b"PK")
            paths.append(path)
        return paths

    return _make

