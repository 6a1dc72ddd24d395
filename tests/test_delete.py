import argparse

import pytest

from kaitoctl.delete import DeleteOptions, add_delete_command
from kaitoctl.kube import ConfigError, KubeError, NotFoundError


class FakeClient:
    def __init__(self, workspaces=None, missing=(), failing=()):
        self.workspaces = workspaces or []
        self.missing = set(missing)
        self.failing = set(failing)
        self.deleted = []

    def get_workspace(self, namespace, name):
        if name in self.missing:
            raise NotFoundError("not found", status=404, reason="NotFound")
        return {"metadata": {"name": name, "namespace": namespace}}

    def list_workspaces(self, namespace):
        return list(self.workspaces)

    def delete_workspace(self, namespace, name):
        if name in self.failing:
            raise KubeError("boom", status=500)
        self.deleted.append((namespace, name))


class FakeFlags:
    def __init__(self, client=None, namespace=None, error=None):
        self.client = client
        self.namespace = namespace
        self.error = error

    def to_client(self):
        if self.error is not None:
            raise self.error
        return self.client


def _ws(name):
    return {"metadata": {"name": name}}


def _new_parser():
    parser = argparse.ArgumentParser()
    return parser, parser.add_subparsers(dest="command")


def test_validate_requires_name_without_all():
    with pytest.raises(ValueError, match="workspace name is required when not using --all"):
        DeleteOptions(workspace_name="").validate()


def test_validate_rejects_name_with_all():
    with pytest.raises(ValueError, match="cannot specify workspace name when using --all"):
        DeleteOptions(workspace_name="ws", all=True).validate()


def test_complete_uses_global_namespace_then_default():
    options = DeleteOptions(config_flags=FakeFlags(namespace="team"), namespace="")
    options.complete()
    assert options.namespace == "team"
    options = DeleteOptions(config_flags=FakeFlags(), namespace="")
    options.complete()
    assert options.namespace == "default"


def test_force_delete_single(capsys):
    client = FakeClient()
    DeleteOptions(config_flags=FakeFlags(client), workspace_name="ws", force=True).run()
    assert client.deleted == [("default", "ws")]
    assert "✓ Successfully deleted workspace ws" in capsys.readouterr().out


def test_single_not_found():
    client = FakeClient(missing={"ws"})
    with pytest.raises(NotFoundError) as info:
        DeleteOptions(config_flags=FakeFlags(client), workspace_name="ws", force=True).run()
    assert str(info.value) == "workspace ws not found in namespace default"
    assert client.deleted == []


def test_confirmation_declined(monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "n")
    client = FakeClient()
    DeleteOptions(config_flags=FakeFlags(client), workspace_name="ws").run()
    assert client.deleted == []
    assert "Delete operation cancelled." in capsys.readouterr().out


@pytest.mark.parametrize("answer", ["y", "YES", "Yes extra"])
def test_confirmation_accepted(monkeypatch, answer):
    monkeypatch.setattr("builtins.input", lambda prompt="": answer)
    client = FakeClient()
    DeleteOptions(config_flags=FakeFlags(client), workspace_name="ws").run()
    assert client.deleted == [("default", "ws")]


def test_confirmation_eof_cancels(monkeypatch):
    def raise_eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", raise_eof)
    client = FakeClient()
    DeleteOptions(config_flags=FakeFlags(client), workspace_name="ws").run()
    assert client.deleted == []


def test_delete_all_continues_after_failure(capsys):
    client = FakeClient(workspaces=[_ws("a"), _ws("b")], failing={"a"})
    DeleteOptions(config_flags=FakeFlags(client), all=True, force=True).run()
    out = capsys.readouterr().out
    assert client.deleted == [("default", "b")]
    assert "Failed to delete workspace a: boom" in out
    assert "Deleting 2 workspace(s)..." in out


def test_delete_all_empty(capsys):
    client = FakeClient()
    DeleteOptions(config_flags=FakeFlags(client), all=True, force=True).run()
    assert "No workspaces found in namespace default." in capsys.readouterr().out


def test_config_error_is_wrapped():
    flags = FakeFlags(error=ConfigError("no config"))
    with pytest.raises(ConfigError, match="^failed to get REST config: no config$"):
        DeleteOptions(config_flags=flags, workspace_name="ws", force=True).run()


def test_command_accepts_prefixed_reference():
    client = FakeClient()
    parser, subparsers = _new_parser()
    add_delete_command(subparsers, FakeFlags(client))
    args = parser.parse_args(["delete", "workspace/ws", "--force", "-n", "ml"])
    args.func(args)
    assert client.deleted == [("ml", "ws")]


def test_command_rejects_invalid_reference():
    client = FakeClient()
    parser, subparsers = _new_parser()
    add_delete_command(subparsers, FakeFlags(client))
    args = parser.parse_args(["delete", "pod/ws", "--force"])
    with pytest.raises(ValueError) as info:
        args.func(args)
    assert str(info.value) == "invalid workspace reference format: pod/ws"
    assert client.deleted == []


def test_command_requires_name_or_all():
    client = FakeClient(workspaces=[_ws("a")])
    parser, subparsers = _new_parser()
    add_delete_command(subparsers, FakeFlags(client))
    args = parser.parse_args(["delete"])
    with pytest.raises(ValueError) as info:
        args.func(args)
    assert str(info.value) == "workspace name is required (or use --all to delete all workspaces)"
    assert client.deleted == []