"""The ``version`` command."""

from __future__ import annotations

import argparse
import platform
import sys
from dataclasses import dataclass

SHORT = "Display version information"
LONG = """Display version information for kubectl-kaito plugin.

Shows the plugin version, build commit, build date, and runtime information."""
EXAMPLE = """  # Show full version information
  kubectl kaito version

  # Show short version only
  kubectl kaito version --short"""


@dataclass
class _BuildInfo:
    version: str = "dev"
    commit: str = "unknown"
    date: str = "unknown"


_BUILD = _BuildInfo()


def set_version_info(version, commit, date):
    """Record the version, commit and build date reported by ``version``."""
    _BUILD.version = version
    _BUILD.commit = commit
    _BUILD.date = date


@dataclass
class VersionOptions:
    config_flags: object = None
    short: bool = False

    def run(self):
        """Print the version information."""
        if self.short:
            print(_BUILD.version)
            return
        print(f"kubectl-kaito version: {_BUILD.version}")
        print(f"Git commit: {_BUILD.commit}")
        print(f"Build date: {_BUILD.date}")
        print(f"Python version: {platform.python_version()}")
        print(f"Python implementation: {platform.python_implementation()}")
        print(f"Platform: {sys.platform}/{platform.machine().lower()}")


def add_version_command(subparsers, config_flags):
    """Register the ``version`` command."""
    parser = subparsers.add_parser(
        "version",
        help=SHORT,
        description=LONG,
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--short", action="store_true", help="Show only the version number")
    parser.set_defaults(
        func=lambda args: VersionOptions(config_flags=config_flags, short=args.short).run()
    )
    return parser