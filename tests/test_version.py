import argparse

import pytest

from kaitoctl.version import VersionOptions, add_version_command, set_version_info


@pytest.fixture(autouse=True)
def restore_version():
    yield
    set_version_info("dev", "unknown", "unknown")


def test_short_version_defaults_to_dev(capsys):
    VersionOptions(short=True).run()
    assert capsys.readouterr().out == "dev\n"


def test_short_version_is_one_line(capsys):
    set_version_info("v1.2.3", "abc123", "2024-01-01T00:00:00Z")
    VersionOptions(short=True).run()
    lines = capsys.readouterr().out.strip().split("\n")
    assert lines == ["v1.2.3"]


def test_full_version_reports_build_info(capsys):
    set_version_info("v1.2.3", "abc123", "2024-01-01T00:00:00Z")
    VersionOptions().run()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "kubectl-kaito version: v1.2.3"
    assert lines[1] == "Git commit: abc123"
    assert lines[2] == "Build date: 2024-01-01T00:00:00Z"
    assert any(line.startswith("Platform: ") for line in lines)


def test_version_command_short_flag(capsys):
    parser = argparse.ArgumentParser()
    add_version_command(parser.add_subparsers(dest="command"), None)
    args = parser.parse_args(["version", "--short"])
    args.func(args)
    assert capsys.readouterr().out == "dev\n"


def test_version_command_full_by_default(capsys):
    parser = argparse.ArgumentParser()
    add_version_command(parser.add_subparsers(dest="command"), None)
    args = parser.parse_args(["version"])
    assert args.short is False
    args.func(args)
    assert len(capsys.readouterr().out.splitlines()) > 1