"""Tests for the command-line entry point."""

import codecs

import pytest

from cupslog import cli


def test_list_reports(capsys):
    assert cli.main(["--list-reports"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Available reports: ")
    for name in ("jobs", "users", "printers", "costs", "complete"):
        assert name in out


def test_dry_run_shows_configuration(sample_config, capsys):
    assert cli.main(["-c", str(sample_config), "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "cupslog configuration:" in out
    assert "0.0.0.0:8080" in out
    assert "watch            : no" in out


def test_dry_run_flag_overrides(sample_config, capsys):
    argv = [
        "-c",
        str(sample_config),
        "--host",
        "127.0.0.1",
        "--port",
        "9000",
        "--dry-run",
    ]
    assert cli.main(argv) == 0
    assert "127.0.0.1:9000" in capsys.readouterr().out


def test_missing_config_exits_with_usage_error(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-c", str(tmp_path / "missing.conf"), "--dry-run"])
    assert excinfo.value.code == 2


def test_export_unknown_kind(sample_config, sample_page_log):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-c", str(sample_config), "--export", "everything"])
    assert excinfo.value.code == 2


def test_export_to_file_writes_bom(sample_config, sample_page_log, tmp_path):
    target = tmp_path / "out" / "users.csv"
    argv = ["-c", str(sample_config), "--export", "users", "-o", str(target)]
    assert cli.main(argv) == 0
    raw = target.read_bytes()
    assert raw.startswith(codecs.BOM_UTF8)
    lines = raw.decode("utf-8-sig").splitlines()
    assert lines[0] == "User,Total Prints,Total Jobs,Printers Used"
    assert lines[1] == '"bob",7,2,"Canon-Pixma, HP-LaserJet"'
    assert lines[2] == '"alice",4,2,"HP-LaserJet"'


def test_export_to_stdout_with_date_range(
    sample_config, sample_page_log, capsys
):
    argv = [
        "-c",
        str(sample_config),
        "--export",
        "daily",
        "--start-date",
        "2025-04-02",
        "--end-date",
        "2025-04-02",
    ]
    assert cli.main(argv) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["Date,Prints,Jobs", '"2025-04-02",2,1']
