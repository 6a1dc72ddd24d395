import argparse

import pytest

from kaitoctl.preset import PresetOptions, add_preset_command, get_model_families


def build_parser():
    parser = argparse.ArgumentParser()
    add_preset_command(parser.add_subparsers(dest="command"), None)
    return parser


def listed_presets(out):
    return [line.strip() for line in out.splitlines() if line.startswith("  ")]


@pytest.mark.parametrize(
    "model_type, heading",
    [
        ("", "Available Kaito Model Presets:"),
        ("llama", "Llama Models:"),
        ("falcon", "Falcon Models:"),
        ("phi", "Phi Models:"),
        ("mistral", "Mistral Models:"),
        ("tuning", "Available Tuning Presets:"),
    ],
)
def test_run_list_known_families(model_type, heading, capsys):
    PresetOptions(model_type=model_type).run_list()
    assert capsys.readouterr().out.splitlines()[0] == heading


def test_run_list_invalid_family():
    with pytest.raises(ValueError, match="unknown model family: invalid"):
        PresetOptions(model_type="invalid").run_list()


def test_invalid_family_message_lists_tuning():
    with pytest.raises(ValueError) as info:
        PresetOptions(model_type="invalid").run_list()
    assert str(info.value).endswith(", tuning")
    for family in ("llama", "falcon", "phi", "mistral"):
        assert family in str(info.value)


@pytest.mark.parametrize("family", ["llama", "falcon", "phi", "mistral"])
def test_family_presets_contain_family_name(family, capsys):
    PresetOptions(model_type=family).run_list()
    presets = listed_presets(capsys.readouterr().out)
    assert len(presets) > 0
    for preset in presets:
        assert family in preset or (family == "phi" and preset == "phi-2")


def test_tuning_presets(capsys):
    PresetOptions(model_type="tuning").run_list()
    names = [line.split(" - ")[0] for line in listed_presets(capsys.readouterr().out)]
    assert sorted(names[:2]) == ["lora", "qlora"]


def test_get_model_families():
    assert sorted(get_model_families()) == sorted(["llama", "falcon", "phi", "mistral"])


def test_list_all_output(capsys):
    PresetOptions().run_list()
    out = capsys.readouterr().out
    for expected in ["Llama", "Falcon", "Phi", "Mistral", "llama-2-7b", "falcon-7b", "phi-2", "mistral-7b"]:
        assert expected in out
    assert out.index("Falcon Models:") < out.index("Llama Models:")


def test_list_family_is_case_insensitive(capsys):
    PresetOptions(model_type="LLAMA").run_list()
    out = capsys.readouterr().out
    assert out.splitlines()[0] == "LLAMA Models:"
    assert "llama-3-8b-instruct" in out


def test_family_underline_and_sorted_order(capsys):
    PresetOptions(model_type="mistral").run_list()
    lines = capsys.readouterr().out.splitlines()
    assert lines[1] == "-" * (len("mistral") + 8)
    assert lines[2:] == ["  mistral-7b", "  mistral-7b-instruct"]


def test_tuning_output(capsys):
    PresetOptions(model_type="tuning").run_list()
    out = capsys.readouterr().out
    assert "qlora - Quantized Low-Rank Adaptation" in out
    assert "lora - Low-Rank Adaptation" in out


def test_preset_command_has_list_subcommand(capsys):
    args = build_parser().parse_args(["preset", "list", "--model", "falcon"])
    assert args.model_type == "falcon"
    args.func(args)
    out = capsys.readouterr().out
    assert "falcon-7b" in out
    assert "falcon-7b-instruct" in out


def test_preset_command_list_invalid_model():
    args = build_parser().parse_args(["preset", "list", "--model", "invalid"])
    with pytest.raises(ValueError):
        args.func(args)


def test_preset_without_action_prints_help(capsys):
    args = build_parser().parse_args(["preset"])
    args.func(args)
    assert "list" in capsys.readouterr().out