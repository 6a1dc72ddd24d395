"""The ``status`` command: show the state of Kaito workspaces."""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from kaitoctl.kube import ConfigError, KubeError
from kaitoctl.workspace import (
    extract_condition_status,
    extract_string_value,
    nested_get,
    parse_workspace_ref,
    resolve_namespace,
)

WATCH_INTERVAL = 5.0

SHORT = "Check the status of Kaito workspaces"
LONG = """Check the status of Kaito workspaces.

This command shows the current status of workspace deployments, including
resource readiness, inference readiness, and other important information."""
EXAMPLE = """  # Check status of a specific workspace
  kubectl kaito status workspace-llama-3

  # Check status with resource type prefix
  kubectl kaito status workspace/workspace-llama-3

  # List all workspaces in current namespace
  kubectl kaito status

  # List workspaces in all namespaces
  kubectl kaito status --all-namespaces

  # Watch workspace status updates
  kubectl kaito status workspace-llama-3 --watch"""

_CONDITIONS = ("ResourceReady", "InferenceReady", "JobStarted", "WorkspaceReady")
_COLUMNS_ALL = (
    ("NAME", 30),
    ("NAMESPACE", 15),
    ("INSTANCE", 25),
    ("RESOURCEREADY", 15),
    ("INFERENCEREADY", 15),
    ("JOBSTARTED", 10),
    ("WORKSPACEREADY", 15),
    ("AGE", 10),
)
_COLUMNS = tuple(column for column in _COLUMNS_ALL if column[0] != "NAMESPACE")


def _wrap(exc: KubeError, message: str) -> KubeError:
    return type(exc)(message, status=exc.status, reason=exc.reason)


def _format_duration(seconds: int) -> str:
    if seconds == 0:
        return "0s"
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"


def _parse_timestamp(value) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _age(workspace, now: datetime) -> str:
    created = _parse_timestamp(nested_get(workspace, "metadata", "creationTimestamp"))
    if created is None:
        return "<unknown>"
    return _format_duration(int((now - created).total_seconds()))


def _row(values, columns) -> str:
    return " ".join(f"{value:<{width}}" for value, (_, width) in zip(values, columns))


@dataclass
class StatusOptions:
    config_flags: object = None
    workspace_name: str = ""
    namespace: str = ""
    all_namespaces: bool = False
    watch: bool = False

    def complete(self):
        """Fill in the namespace unless all namespaces are requested."""
        if not self.all_namespaces and not self.namespace:
            self.namespace = resolve_namespace(self.namespace, self.config_flags)

    def validate(self):
        """Raise ``ValueError`` for conflicting options."""
        if self.all_namespaces and self.namespace:
            raise ValueError("cannot specify both --namespace and --all-namespaces")

    def run(self):
        """Show one workspace, list workspaces, or watch one workspace."""
        try:
            client = self.config_flags.to_client()
        except ConfigError as exc:
            raise ConfigError(f"failed to get REST config: {exc}") from exc

        if self.watch:
            self._watch_workspace(client)
        elif self.workspace_name:
            self._show_workspace_status(client)
        else:
            self._list_workspaces(client)

    def _show_workspace_status(self, client):
        try:
            workspace = client.get_workspace(self.namespace, self.workspace_name)
        except KubeError as exc:
            raise _wrap(
                exc, f"failed to get workspace {self.workspace_name}: {exc}"
            ) from exc
        print(self.format_workspace_detail(workspace), end="")

    def _list_workspaces(self, client):
        namespace = None if self.all_namespaces else self.namespace
        try:
            workspaces = client.list_workspaces(namespace)
        except KubeError as exc:
            raise _wrap(exc, f"failed to list workspaces: {exc}") from exc

        if not workspaces:
            if self.all_namespaces:
                print("No workspaces found in any namespace.")
            else:
                print(f"No workspaces found in namespace {self.namespace}.")
            return
        print(self.format_workspaces_table(workspaces), end="")

    def _watch_workspace(self, client):
        if not self.workspace_name:
            raise ValueError("workspace name is required for watch mode")

        print(f"Watching workspace {self.workspace_name} in namespace {self.namespace}...")
        print("Press Ctrl+C to stop watching")
        print()
        try:
            while True:
                try:
                    workspace = client.get_workspace(self.namespace, self.workspace_name)
                except KubeError as exc:
                    print(f"Error getting workspace: {exc}")
                    time.sleep(WATCH_INTERVAL)
                    continue
                print("\033[2J\033[H", end="")
                print(f"Last updated: {datetime.now().strftime('%H:%M:%S')}\n")
                print(self.format_workspace_detail(workspace), end="", flush=True)
                time.sleep(WATCH_INTERVAL)
        except KeyboardInterrupt:
            return

    def format_workspaces_table(self, workspaces, now=None) -> str:
        """Return the workspace table, with ages measured against ``now``."""
        if now is None:
            now = datetime.now(timezone.utc)
        columns = _COLUMNS_ALL if self.all_namespaces else _COLUMNS
        lines = [_row([title for title, _ in columns], columns)]
        for workspace in workspaces:
            status = nested_get(workspace, "status")
            if not isinstance(status, dict):
                status = {}
            values = [extract_string_value(workspace, "metadata", "name")]
            if self.all_namespaces:
                values.append(extract_string_value(workspace, "metadata", "namespace"))
            values.append(
                extract_string_value(workspace, "spec", "resource", "instanceType")
            )
            values.extend(extract_condition_status(status, kind) for kind in _CONDITIONS)
            values.append(_age(workspace, now))
            lines.append(_row(values, columns))
        return "".join(f"{line}\n" for line in lines)

    def format_workspace_detail(self, workspace) -> str:
        """Return the detailed description of one workspace."""
        lines = [
            f"Name:      {extract_string_value(workspace, 'metadata', 'name')}",
            f"Namespace: {extract_string_value(workspace, 'metadata', 'namespace')}",
        ]
        instance_type = extract_string_value(workspace, "spec", "resource", "instanceType")
        if instance_type:
            lines.append(f"Instance:  {instance_type}")

        status = nested_get(workspace, "status")
        if not isinstance(status, dict):
            lines.append("Status:    No status available")
            return "".join(f"{line}\n" for line in lines)

        lines.append("")
        lines.append("Conditions:")
        conditions = nested_get(status, "conditions")
        if isinstance(conditions, list):
            for condition in conditions:
                if not isinstance(condition, dict):
                    continue
                text = (
                    f"  {extract_string_value(condition, 'type')}: "
                    f"{extract_string_value(condition, 'status')}"
                )
                message = extract_string_value(condition, "message")
                if message:
                    text += f" ({message})"
                lines.append(text)
        lines.append("")
        return "".join(f"{line}\n" for line in lines)


def _execute(args, config_flags):
    options = StatusOptions(
        config_flags=config_flags,
        workspace_name=parse_workspace_ref(args.workspace) if args.workspace else "",
        namespace=args.namespace,
        all_namespaces=args.all_namespaces,
        watch=args.watch,
    )
    options.complete()
    options.validate()
    options.run()


def add_status_command(subparsers, config_flags):
    """Register the ``status`` command."""
    parser = subparsers.add_parser(
        "status",
        help=SHORT,
        description=LONG,
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("workspace", nargs="?", default=None, metavar="workspace-name")
    parser.add_argument("-n", "--namespace", default="", help="Kubernetes namespace")
    parser.add_argument(
        "-A",
        "--all-namespaces",
        dest="all_namespaces",
        action="store_true",
        help="Show workspaces in all namespaces",
    )
    parser.add_argument("-w", "--watch", action="store_true", help="Watch for changes")
    parser.set_defaults(func=lambda args: _execute(args, config_flags))
    return parser