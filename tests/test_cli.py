"""
Tests for the ark command line.

Tests cover:
- Source list parsing
- Exit codes for success, skipped creation and fatal errors
- Announcements on stdout and errors on stderr
- DEBUG environment flag
"""

from datetime import date

import pytest

from ark.cli import main, parse_sources
from ark.dates import snapshot_name


class TestParseSources:
    """Tests for parse_sources()."""

    def test_single_path(self):
        assert parse_sources("/path/to/xy.db") == ["/path/to/xy.db"]

    def test_comma_separated_paths_are_trimmed(self):
        assert parse_sources(" /a/xy.db , /a/xy.sql ") == ["/a/xy.db", "/a/xy.sql"]

    def test_blank_entries_are_dropped(self):
        assert parse_sources("a,,b,") == ["a", "b"]
        assert parse_sources(" , ") == []


class TestMain:
    """Tests for main()."""

    def _sources_arg(self, backup_env):
        return ",".join(str(p) for p in backup_env["sources"])

    def test_backup_and_rotation(self, backup_env, capsys):
        """A normal run should create today's snapshot and exit 0."""
        code = main([self._sources_arg(backup_env), str(backup_env["backup_dir"])])

        out = capsys.readouterr().out
        assert code == 0
        assert (backup_env["backup_dir"] / snapshot_name(date.today())).exists()
        assert f"Created backup: {snapshot_name(date.today())}" in out
        assert "Backup and rotation completed." in out

    def test_skip_is_still_success(self, backup_env, capsys):
        args = [self._sources_arg(backup_env), str(backup_env["backup_dir"])]
        assert main(args) == 0
        capsys.readouterr()

        assert main(args) == 0
        out = capsys.readouterr().out
        assert "already exists. Skipping creation." in out

    def test_missing_source_exits_1(self, backup_env, capsys):
        missing = backup_env["data_dir"] / "missing.db"

        code = main([str(missing), str(backup_env["backup_dir"])])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.err.startswith("Error:")
        assert list(backup_env["backup_dir"].iterdir()) == []

    def test_empty_source_list_exits_1(self, backup_env, capsys):
        code = main([" , ", str(backup_env["backup_dir"])])

        assert code == 1
        assert "no source files" in capsys.readouterr().err

    def test_uncreatable_destination_exits_1(self, backup_env, capsys):
        blocker = backup_env["tmp_path"] / "blocker"
        blocker.write_text("x")

        code = main([self._sources_arg(backup_env), str(blocker / "backups")])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_arguments_exit_2(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_dry_run(self, backup_env, capsys):
        code = main([self._sources_arg(backup_env), str(backup_env["backup_dir"]), "--dry-run"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Would create backup" in out
        assert "Dry run complete." in out
        assert list(backup_env["backup_dir"].iterdir()) == []

    def test_dry_run_missing_source_exits_1(self, backup_env, capsys):
        missing = backup_env["data_dir"] / "missing.db"

        code = main([str(missing), str(backup_env["backup_dir"]), "--dry-run"])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.err.startswith("Error:")
        assert "Would create backup" not in captured.out

    def test_debug_env_does_not_change_decisions(self, backup_env, make_snapshots, monkeypatch, capsys):
        """DEBUG=1 only raises log verbosity."""
        make_snapshots(backup_env["backup_dir"], [date(2001, 1, 1)])
        monkeypatch.setenv("DEBUG", "1")

        code = main([self._sources_arg(backup_env), str(backup_env["backup_dir"])])

        captured = capsys.readouterr()
        assert code == 0
        assert "Deleted old backup: export20010101.zip" in captured.out
        assert "tier keeps" in captured.err
