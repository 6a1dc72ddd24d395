import argparse

import pytest

from kaitoctl.kube import AlreadyExistsError, ConfigFlags, KubeError
from kaitoctl.tune import TuneOptions, add_tune_command


class FakeClient:
    def __init__(self, error=None):
        self.created = []
        self.error = error

    def create_workspace(self, namespace, body):
        if self.error is not None:
            raise self.error
        self.created.append((namespace, body))
        return body


class FakeFlags:
    namespace = None

    def __init__(self, client):
        self.client = client

    def to_client(self):
        return self.client


def _root():
    root = argparse.ArgumentParser(prog="kaito")
    subparsers = root.add_subparsers(dest="command")
    parser = add_tune_command(subparsers, ConfigFlags())
    return root, parser


def test_tune_flag_defaults():
    _, parser = _root()
    assert parser.get_default("preset") == "qlora"
    assert parser.get_default("namespace") == "default"
    assert parser.get_default("instance_type") == ""


def test_tune_missing_dataset():
    root, _ = _root()
    with pytest.raises(SystemExit) as info:
        root.parse_args(["tune", "--name", "test", "--model", "llama-2-7b"])
    assert info.value.code == 2


def test_complete_defaults():
    o = TuneOptions(config_flags=ConfigFlags(), namespace="", base_model="phi-2", dataset="d")
    o.complete()
    assert o.namespace == "default"
    assert o.instance_type == "Standard_NC24ads_A100_v4"
    assert o.preset == "qlora"
    assert o.label_selector == {"apps": "phi-2-tune"}


def test_complete_keeps_explicit_values():
    o = TuneOptions(namespace="ns1", instance_type="Standard_NC12s_v3", base_model="m")
    o.complete()
    assert o.namespace == "ns1"
    assert o.instance_type == "Standard_NC12s_v3"


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"base_model": "m", "dataset": "d"}, "name is required"),
        ({"name": "n", "dataset": "d"}, "model is required"),
        ({"name": "n", "base_model": "m"}, "dataset is required"),
    ],
)
def test_validate_errors(kwargs, message):
    with pytest.raises(ValueError) as info:
        TuneOptions(**kwargs).validate()
    assert str(info.value) == message


def test_build_workspace():
    o = TuneOptions(name="t", base_model="phi-2", dataset="gs://test-data", preset="lora")
    o.complete()
    body = o.build_workspace()
    assert body["kind"] == "Workspace"
    assert body["metadata"]["name"] == "t"
    assert body["spec"]["resource"]["count"] == 1
    tuning = body["spec"]["tuning"]
    assert tuning["preset"] == {"name": "lora"}
    assert tuning["method"] == "qlora"
    assert tuning["input"]["urls"] == ["gs://test-data"]
    assert tuning["output"]["adapters"]["enabled"] is True


def test_dry_run_output(capsys):
    root, _ = _root()
    args = root.parse_args(
        [
            "tune", "--name", "test-tune", "--model", "phi-2",
            "--dataset", "gs://test-data", "--preset", "lora", "--dry-run",
        ]
    )
    args.func(args)
    out = capsys.readouterr().out
    assert "Dry-run mode" in out
    assert "would be created" in out
    assert "Dataset: gs://test-data" in out
    assert "Preset: lora" in out


def test_run_creates_workspace(capsys):
    client = FakeClient()
    o = TuneOptions(config_flags=FakeFlags(client), name="t", base_model="m", dataset="d")
    o.complete()
    o.run()
    assert client.created == [("default", o.build_workspace())]
    assert "Successfully created fine-tuning workspace t" in capsys.readouterr().out


def test_run_already_exists():
    client = FakeClient(error=AlreadyExistsError("exists", status=409))
    o = TuneOptions(config_flags=FakeFlags(client), name="t", base_model="m", dataset="d")
    o.complete()
    with pytest.raises(AlreadyExistsError) as info:
        o.run()
    assert str(info.value) == "workspace t already exists in namespace default"


def test_run_other_error():
    client = FakeClient(error=KubeError("boom"))
    o = TuneOptions(config_flags=FakeFlags(client), name="t", base_model="m", dataset="d")
    o.complete()
    with pytest.raises(KubeError) as info:
        o.run()
    assert str(info.value).startswith("failed to create workspace:")