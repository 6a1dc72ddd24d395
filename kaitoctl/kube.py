"""Kubernetes connection settings and a small REST client for Kaito workspaces."""

from __future__ import annotations

import argparse
import base64
import binascii
import contextlib
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

import requests
import yaml

WORKSPACE_API = "/apis/kaito.sh/v1beta1"
_TIMEOUT_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)(s|m|h)?$")
_TIMEOUT_UNITS = {None: 1, "s": 1, "m": 60, "h": 3600}


class KubeError(Exception):
    """An error reported by, or while talking to, the Kubernetes API."""

    def __init__(self, message, status=None, reason=None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class ConfigError(KubeError):
    """The connection settings could not be loaded."""


class NotFoundError(KubeError):
    """The requested object does not exist."""


class AlreadyExistsError(KubeError):
    """The object to create exists already."""


def _raise_for_status(response):
    code = response.status_code
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    reason = payload.get("reason") or None
    message = payload.get("message") or response.text.strip() or f"status {code}"
    response.close()
    if reason == "NotFound" or code == 404:
        raise NotFoundError(message, status=code, reason="NotFound")
    if reason == "AlreadyExists":
        raise AlreadyExistsError(message, status=code, reason=reason)
    raise KubeError(message, status=code, reason=reason)


def _iter_body(response):
    with contextlib.closing(response):
        yield from (chunk for chunk in response.iter_content(chunk_size=None) if chunk)


class KubeClient:
    """Talks to the Kubernetes REST API for workspaces, pods and pod logs."""

    def __init__(self, server, *, token=None, verify=True, cert=None, auth=None,
                 timeout=None, session=None):
        self.server = server.rstrip("/")
        self.headers = {"Accept": "application/json"}
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self.verify = verify
        self.cert = cert
        self.auth = auth
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()

    def _request(self, method, path, *, params=None, body=None, stream=False):
        try:
            response = self.session.request(
                method, self.server + path, params=params, json=body,
                headers=self.headers, verify=self.verify, cert=self.cert,
                auth=self.auth, timeout=self.timeout, stream=stream,
            )
        except requests.RequestException as exc:
            raise KubeError(str(exc)) from exc
        if response.status_code >= 400:
            _raise_for_status(response)
        return response

    def _json(self, method, path, **kwargs):
        try:
            return self._request(method, path, **kwargs).json()
        except ValueError as exc:
            raise KubeError(f"invalid response from {method} {path}: {exc}") from exc

    @staticmethod
    def _workspaces(namespace, name=None):
        path = f"{WORKSPACE_API}/workspaces"
        if namespace is not None:
            path = f"{WORKSPACE_API}/namespaces/{quote(namespace, safe='')}/workspaces"
        return path if name is None else f"{path}/{quote(name, safe='')}"

    def get_workspace(self, namespace, name):
        """Return the workspace object called ``name``."""
        return self._json("GET", self._workspaces(namespace, name))

    def list_workspaces(self, namespace=None):
        """Return the workspaces of a namespace, or of all namespaces for ``None``."""
        return list(self._json("GET", self._workspaces(namespace)).get("items") or [])

    def create_workspace(self, namespace, body):
        """Create a workspace and return the object the server stored."""
        return self._json("POST", self._workspaces(namespace), body=body)

    def delete_workspace(self, namespace, name):
        """Delete the workspace called ``name``."""
        self._request("DELETE", self._workspaces(namespace, name)).close()

    def list_pods(self, namespace, label_selector):
        """Return the pods in ``namespace`` that match ``label_selector``."""
        payload = self._json(
            "GET", f"/api/v1/namespaces/{quote(namespace, safe='')}/pods",
            params={"labelSelector": label_selector},
        )
        return list(payload.get("items") or [])

    def stream_pod_logs(self, namespace, pod, container, follow, tail_lines):
        """Open the log stream of a pod and return an iterator of byte chunks."""
        params = {}
        if container:
            params["container"] = container
        if follow:
            params["follow"] = "true"
        if tail_lines is not None and tail_lines >= 0:
            params["tailLines"] = str(tail_lines)
        path = f"/api/v1/namespaces/{quote(namespace, safe='')}/pods/{quote(pod, safe='')}/log"
        return _iter_body(self._request("GET", path, params=params, stream=True))


def _find_kubeconfig(path):
    if path:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"kubeconfig {path} does not exist")
        return candidate
    entries = os.environ.get("KUBECONFIG", "").split(os.pathsep)
    for candidate in [Path(e).expanduser() for e in entries if e] + [Path.home() / ".kube" / "config"]:
        if candidate.is_file():
            return candidate
    raise ConfigError("no kubeconfig found")


def _named(data, list_key, item_key, name):
    for entry in data.get(list_key) or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            value = entry.get(item_key)
            return value if isinstance(value, dict) else {}
    return None


def _file_or_data(section, key, base_dir, suffix):
    data = section.get(f"{key}-data")
    if data:
        try:
            content = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ConfigError(f"invalid base64 in {key}-data: {exc}") from exc
        with tempfile.NamedTemporaryFile("wb", suffix=suffix, delete=False) as handle:
            handle.write(content)
        return handle.name
    path = section.get(key)
    return str(base_dir / Path(path).expanduser()) if path else None


def load_kubeconfig(path=None, context=None) -> KubeClient:
    """Build a client from a kubeconfig file."""
    config_path = _find_kubeconfig(path)
    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"failed to read kubeconfig {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"kubeconfig {config_path} is not a mapping")

    context_name = context or data.get("current-context")
    if not context_name:
        raise ConfigError("current-context is not set in kubeconfig")
    ctx = _named(data, "contexts", "context", context_name)
    if ctx is None:
        raise ConfigError(f'context "{context_name}" does not exist')
    cluster = _named(data, "clusters", "cluster", ctx.get("cluster"))
    if not cluster or not cluster.get("server"):
        raise ConfigError(f'cluster "{ctx.get("cluster")}" has no server')
    user = _named(data, "users", "user", ctx.get("user")) or {}
    base_dir = config_path.parent

    verify = (
        False if cluster.get("insecure-skip-tls-verify")
        else _file_or_data(cluster, "certificate-authority", base_dir, ".crt") or True
    )
    cert_file = _file_or_data(user, "client-certificate", base_dir, ".crt")
    key_file = _file_or_data(user, "client-key", base_dir, ".key")
    username, password = user.get("username"), user.get("password")
    return KubeClient(
        cluster["server"],
        token=user.get("token"),
        verify=verify,
        cert=(cert_file, key_file) if cert_file and key_file else None,
        auth=(username, password) if username and password is not None else None,
    )


def _parse_timeout(value):
    match = _TIMEOUT_PATTERN.match(value.strip())
    if match is None:
        raise ConfigError(f"invalid request timeout: {value}")
    return float(match.group(1)) * _TIMEOUT_UNITS[match.group(2)] or None


class _Bind(argparse.Action):
    """Stores an option's value on a target object rather than on the namespace."""

    def __init__(self, option_strings, dest, *, target, attribute, flag=False, **kwargs):
        if flag:
            kwargs["nargs"] = 0
        super().__init__(option_strings, dest, default=argparse.SUPPRESS, **kwargs)
        self.target, self.attribute, self.flag = target, attribute, flag

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(self.target, self.attribute, True if self.flag else values)


@dataclass
class ConfigFlags:
    """The global connection options shared by every command."""

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str | None = None
    server: str | None = None
    token: str | None = None
    certificate_authority: str | None = None
    insecure_skip_tls_verify: bool = False
    request_timeout: str | None = None

    def add_arguments(self, parser):
        """Register the connection options on ``parser``, bound to this object."""
        options = [
            (("--kubeconfig",), "kubeconfig", "Path to the kubeconfig file"),
            (("--context",), "context", "The kubeconfig context to use"),
            (("-n", "--namespace"), "namespace", "The namespace scope for this request"),
            (("-s", "--server"), "server", "The address of the API server"),
            (("--token",), "token", "Bearer token for the API server"),
            (("--certificate-authority",), "certificate_authority", "Path to a CA cert file"),
            (("--request-timeout",), "request_timeout", "Timeout of a single request (0 waits forever)"),
            (("--insecure-skip-tls-verify",), "insecure_skip_tls_verify", "Do not verify the server certificate"),
        ]
        for names, attribute, help_text in options:
            parser.add_argument(
                *names, action=_Bind, dest=f"kube_{attribute}", target=self,
                attribute=attribute, flag=attribute == "insecure_skip_tls_verify",
                help=help_text,
            )

    def to_client(self) -> KubeClient:
        """Build a client from the kubeconfig with these options applied on top."""
        try:
            client = load_kubeconfig(self.kubeconfig, self.context)
        except ConfigError:
            if not self.server:
                raise
            client = KubeClient(self.server)
        if self.server:
            client.server = self.server.rstrip("/")
        if self.token:
            client.headers["Authorization"] = f"Bearer {self.token}"
        if self.certificate_authority:
            client.verify = self.certificate_authority
        if self.insecure_skip_tls_verify:
            client.verify = False
        if self.request_timeout:
            client.timeout = _parse_timeout(self.request_timeout)
        return client