"""The ``logs`` command: print the logs of a workspace's pods."""

from __future__ import annotations

import sys
from dataclasses import dataclass

import requests

from kaitoctl.kube import ConfigError, KubeError, NotFoundError
from kaitoctl.workspace import nested_get, resolve_namespace


def _first_container(pod) -> str:
    containers = nested_get(pod, "spec", "containers")
    if isinstance(containers, list) and containers and isinstance(containers[0], dict):
        return containers[0].get("name") or ""
    return ""


def _rewrap(exc, prefix):
    return type(exc)(f"{prefix}: {exc}", status=exc.status, reason=exc.reason)


@dataclass
class LogsOptions:
    config_flags: object = None
    workspace_name: str = ""
    namespace: str = "default"
    follow: bool = False
    tail: int = -1
    container: str = ""

    def complete(self):
        """Fill in the namespace."""
        self.namespace = resolve_namespace(self.namespace, self.config_flags)

    def validate(self):
        """Raise ``ValueError`` if no workspace is named."""
        if not self.workspace_name:
            raise ValueError("workspace name is required")

    def _find_pods(self, client):
        try:
            pods = client.list_pods(self.namespace, f"app={self.workspace_name}")
        except KubeError as exc:
            raise _rewrap(exc, "failed to list pods") from exc
        for selector in (f"workspace={self.workspace_name}",
                         f"kaito.sh/workspace={self.workspace_name}"):
            if pods:
                return pods
            try:
                pods = client.list_pods(self.namespace, selector)
            except KubeError:
                pods = []
        if pods:
            return pods
        raise NotFoundError(
            f"no pods found for workspace {self.workspace_name} in namespace {self.namespace}"
        )

    def run(self):
        """Print the logs of every pod that belongs to the workspace."""
        try:
            client = self.config_flags.to_client()
        except ConfigError as exc:
            raise ConfigError(f"failed to get REST config: {exc}") from exc

        pods = self._find_pods(client)
        several = len(pods) > 1
        for pod in pods:
            name = nested_get(pod, "metadata", "name") or ""
            if several:
                print(f"==> Pod: {name} <==")
            try:
                self._stream_logs(client, name, self.container or _first_container(pod))
            except KubeError as exc:
                print(f"Error getting logs from pod {name}: {exc}")
                continue
            if several:
                print()

    def _stream_logs(self, client, pod, container):
        tail = self.tail if self.tail >= 0 else None
        try:
            chunks = client.stream_pod_logs(self.namespace, pod, container, self.follow, tail)
        except KubeError as exc:
            raise _rewrap(exc, "failed to stream logs") from exc
        sys.stdout.flush()
        try:
            for chunk in chunks:
                sys.stdout.buffer.write(chunk)
                sys.stdout.buffer.flush()
        except (requests.RequestException, OSError) as exc:
            raise KubeError(f"failed to copy logs: {exc}") from exc


def _execute(args, config_flags):
    options = LogsOptions(config_flags, args.workspace, args.namespace,
                          args.follow, args.tail, args.container)
    options.complete()
    options.validate()
    options.run()


def add_logs_command(subparsers, config_flags):
    """Register the ``logs`` command."""
    parser = subparsers.add_parser(
        "logs",
        help="Get logs from Kaito workspace pods",
        description="Print the logs of the pods that belong to a Kaito workspace.",
    )
    parser.add_argument("workspace", metavar="workspace-name")
    parser.add_argument("-n", "--namespace", default="default", help="Kubernetes namespace")
    parser.add_argument("-f", "--follow", action="store_true", help="Follow log output")
    parser.add_argument("--tail", type=int, default=-1,
                        help="Number of lines to show from the end of the logs")
    parser.add_argument("-c", "--container", default="", help="Container name")
    parser.set_defaults(func=lambda args: _execute(args, config_flags))
    return parser