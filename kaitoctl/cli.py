"""Command-line entry point for managing Kaito workspaces."""

from __future__ import annotations

import argparse
import os
import sys

from kaitoctl.delete import add_delete_command
from kaitoctl.deploy import add_deploy_command
from kaitoctl.kube import ConfigFlags, KubeError
from kaitoctl.logs import add_logs_command
from kaitoctl.preset import add_preset_command
from kaitoctl.status import add_status_command
from kaitoctl.tune import add_tune_command
from kaitoctl.version import add_version_command

SHORT = "Kubernetes AI Toolchain Operator (Kaito) CLI"
LONG = """kubectl-kaito is a command-line tool for managing AI/ML model inference
and fine-tuning workloads using the Kubernetes AI Toolchain Operator (Kaito).

This plugin simplifies the deployment, management, and monitoring of AI models
in Kubernetes clusters through Kaito workspaces."""
EXAMPLE = """  # Check plugin version
  {name} version

  # Deploy a model for inference
  {name} deploy --name workspace-llama-3 --model llama-2-7b --gpus 1 --preset chat

  # Fine-tune a model
  {name} tune --name workspace-llama-3-tune --model llama-2-7b --dataset gs://teamA-ds --preset qlora

  # Check workspace status
  {name} status workspace/workspace-llama-3

  # List available presets
  {name} preset list

  # Get logs from a workspace
  {name} logs workspace-llama-3"""


class _Parser(argparse.ArgumentParser):
    """An argument parser whose usage line starts with ``Usage:``."""

    @staticmethod
    def _capitalise(text: str) -> str:
        return "Usage:" + text[len("usage:"):] if text.startswith("usage:") else text

    def format_usage(self):
        return self._capitalise(super().format_usage())

    def format_help(self):
        return self._capitalise(super().format_help())


def is_kubectl_plugin(program) -> bool:
    """Return whether the program was started under a ``kubectl-`` name."""
    return os.path.basename(program).startswith("kubectl-")


def build_parser(config_flags, is_plugin):
    """Build the root parser with the global options and all subcommands."""
    name = "kubectl kaito" if is_plugin else "kaito"
    parser = _Parser(
        prog=name,
        description=f"{SHORT}\n\n{LONG}",
        epilog=EXAMPLE.format(name=name),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_flags.add_arguments(parser)
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for register in (
        add_deploy_command,
        add_tune_command,
        add_status_command,
        add_logs_command,
        add_preset_command,
        add_delete_command,
        add_version_command,
    ):
        register(subparsers, config_flags)
    return parser


def main(argv=None) -> int:
    """Run the command line and return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    program = sys.argv[0] if sys.argv and sys.argv[0] else "kaito"
    config_flags = ConfigFlags()
    parser = build_parser(config_flags, is_kubectl_plugin(program))
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 0
    try:
        func(args)
    except (KubeError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())