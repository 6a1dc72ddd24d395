"""The ``delete`` command: remove Kaito workspaces."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from kaitoctl.kube import ConfigError, KubeError, NotFoundError
from kaitoctl.workspace import extract_string_value, parse_workspace_ref, resolve_namespace

SHORT = "Delete Kaito workspaces"
LONG = """Delete Kaito workspaces.

This command removes Kaito workspaces and their associated resources.
The GPU nodes provisioned by the workspace will also be cleaned up."""
EXAMPLE = """  # Delete a specific workspace
  kubectl kaito delete workspace-llama-3

  # Delete with resource type prefix
  kubectl kaito delete workspace/workspace-llama-3

  # Delete all workspaces in current namespace
  kubectl kaito delete --all

  # Force delete without confirmation
  kubectl kaito delete workspace-llama-3 --force"""

_CLEANUP_NOTE = "Note: Associated GPU nodes will be cleaned up automatically by Kaito."


def _confirm(question: str) -> bool:
    try:
        answer = input(question)
    except EOFError:
        answer = ""
    words = answer.split()
    response = words[0].lower() if words else ""
    return response in ("y", "yes")


def _wrap(exc: KubeError, message: str) -> KubeError:
    return type(exc)(message, status=exc.status, reason=exc.reason)


@dataclass
class DeleteOptions:
    config_flags: object = None
    workspace_name: str = ""
    namespace: str = "default"
    all: bool = False
    force: bool = False

    def complete(self):
        """Fill in the namespace."""
        self.namespace = resolve_namespace(self.namespace, self.config_flags)

    def validate(self):
        """Raise ``ValueError`` when the workspace selection is missing or conflicting."""
        if not self.all and not self.workspace_name:
            raise ValueError("workspace name is required when not using --all")
        if self.all and self.workspace_name:
            raise ValueError("cannot specify workspace name when using --all")

    def run(self):
        """Delete the named workspace, or every workspace in the namespace."""
        try:
            client = self.config_flags.to_client()
        except ConfigError as exc:
            raise ConfigError(f"failed to get REST config: {exc}") from exc

        if self.all:
            self._delete_all_workspaces(client)
        else:
            self._delete_single_workspace(client)

    def _delete_single_workspace(self, client):
        name, namespace = self.workspace_name, self.namespace
        try:
            client.get_workspace(namespace, name)
        except NotFoundError as exc:
            raise _wrap(exc, f"workspace {name} not found in namespace {namespace}") from exc
        except KubeError as exc:
            raise _wrap(exc, f"failed to get workspace {name}: {exc}") from exc

        if not self.force and not _confirm(
            f"Are you sure you want to delete workspace {name} in namespace {namespace}? (y/N): "
        ):
            print("Delete operation cancelled.")
            return

        print(f"Deleting workspace {name}...")
        try:
            client.delete_workspace(namespace, name)
        except KubeError as exc:
            raise _wrap(exc, f"failed to delete workspace {name}: {exc}") from exc

        print(f"✓ Successfully deleted workspace {name}")
        print(_CLEANUP_NOTE)

    def _delete_all_workspaces(self, client):
        try:
            workspaces = client.list_workspaces(self.namespace)
        except KubeError as exc:
            raise _wrap(exc, f"failed to list workspaces: {exc}") from exc

        if not workspaces:
            print(f"No workspaces found in namespace {self.namespace}.")
            return

        count = len(workspaces)
        if not self.force and not _confirm(
            f"Are you sure you want to delete all {count} workspace(s) "
            f"in namespace {self.namespace}? (y/N): "
        ):
            print("Delete operation cancelled.")
            return

        print(f"Deleting {count} workspace(s)...")
        for workspace in workspaces:
            name = extract_string_value(workspace, "metadata", "name")
            print(f"Deleting workspace {name}...")
            try:
                client.delete_workspace(self.namespace, name)
            except KubeError as exc:
                print(f"Failed to delete workspace {name}: {exc}")
                continue
            print(f"✓ Successfully deleted workspace {name}")

        print(_CLEANUP_NOTE)


def _execute(args, config_flags):
    if not args.all and args.workspace is None:
        raise ValueError("workspace name is required (or use --all to delete all workspaces)")
    options = DeleteOptions(
        config_flags=config_flags,
        workspace_name=parse_workspace_ref(args.workspace) if args.workspace else "",
        namespace=args.namespace,
        all=args.all,
        force=args.force,
    )
    options.complete()
    options.validate()
    options.run()


def add_delete_command(subparsers, config_flags):
    """Register the ``delete`` command."""
    parser = subparsers.add_parser(
        "delete",
        help=SHORT,
        description=LONG,
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("workspace", nargs="?", default=None, metavar="workspace-name")
    parser.add_argument("-n", "--namespace", default="default", help="Kubernetes namespace")
    parser.add_argument(
        "--all", action="store_true", help="Delete all workspaces in the namespace"
    )
    parser.add_argument("--force", action="store_true", help="Skip confirmation prompt")
    parser.set_defaults(func=lambda args: _execute(args, config_flags))
    return parser