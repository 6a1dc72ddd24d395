"""The ``preset`` command: known model and tuning presets."""

from __future__ import annotations

import re
from dataclasses import dataclass

KNOWN_PRESETS: dict[str, tuple[str, ...]] = {
    family: tuple(names.split())
    for family, names in {
        "llama": "llama-2-7b llama-2-7b-chat llama-2-13b llama-2-13b-chat "
        "llama-2-70b llama-2-70b-chat llama-3-8b-instruct llama-3-70b-instruct",
        "falcon": "falcon-7b falcon-7b-instruct falcon-40b falcon-40b-instruct "
        "falcon-180b falcon-180b-chat",
        "phi": "phi-2 phi-3-mini-4k-instruct phi-3-mini-128k-instruct "
        "phi-3-small-8k-instruct phi-3-small-128k-instruct phi-3-medium-4k-instruct "
        "phi-3-medium-128k-instruct phi-3.5-mini-instruct",
        "mistral": "mistral-7b mistral-7b-instruct",
    }.items()
}

TUNING_PRESETS: tuple[str, ...] = ("qlora", "lora")

_TUNING_DESCRIPTIONS = {
    "qlora": "Quantized Low-Rank Adaptation (recommended for most use cases)",
    "lora": "Low-Rank Adaptation",
}

_DEPLOY_EXAMPLE = "deploy --name my-workspace --model llama-3-8b-instruct --preset instruct"
_TUNE_EXAMPLE = "tune --name my-tuned-model --model llama-2-7b --dataset s3://my-data --preset qlora"


def get_model_families() -> list[str]:
    """Return the names of the known model families."""
    return list(KNOWN_PRESETS)


def _heading(text, rule):
    print(text)
    print(rule * len(text) if rule == "=" else rule * (len(text) - 1))


def _print_model_presets(family, presets):
    title = re.sub(r"\b\w", lambda m: m.group().upper(), family)
    print(f"{title} Models:")
    print("-" * (len(family) + 8))
    for preset in sorted(presets):
        print(f"  {preset}")


def _print_all_presets():
    _heading("Available Kaito Model Presets:", "=")
    print()
    for family in sorted(KNOWN_PRESETS):
        _print_model_presets(family, KNOWN_PRESETS[family])
        print()
    _heading("Tuning Presets:", "-")
    for preset in TUNING_PRESETS:
        print(f"  {preset}")
    print()
    print("Usage Examples:")
    print(f"  kubectl kaito {_DEPLOY_EXAMPLE}")
    print(f"  kubectl kaito {_TUNE_EXAMPLE}")


def _print_tuning_presets():
    print("Available Tuning Presets:")
    print("=" * 24)
    print()
    for preset in TUNING_PRESETS:
        description = _TUNING_DESCRIPTIONS.get(preset)
        print(f"  {preset} - {description}" if description else f"  {preset}")
    print()
    print("Usage Example:")
    print(f"  kubectl kaito {_TUNE_EXAMPLE}")


@dataclass
class PresetOptions:
    config_flags: object = None
    model_type: str = ""

    def run_list(self):
        """Print the presets selected by ``model_type``."""
        if not self.model_type:
            _print_all_presets()
        elif self.model_type == "tuning":
            _print_tuning_presets()
        elif (presets := KNOWN_PRESETS.get(self.model_type.lower())) is not None:
            _print_model_presets(self.model_type, presets)
        else:
            raise ValueError(
                f"unknown model family: {self.model_type}. "
                f"Available families: {', '.join(get_model_families())}, tuning"
            )


def add_preset_command(subparsers, config_flags):
    """Register the ``preset`` command and its ``list`` subcommand."""
    parser = subparsers.add_parser(
        "preset",
        help="Manage Kaito model presets",
        description="Discover the model presets available for inference and fine-tuning.",
    )
    actions = parser.add_subparsers(dest="preset_action", metavar="<command>")
    list_parser = actions.add_parser(
        "list",
        help="List available model presets",
        description="List the presets usable with the deploy and tune commands.",
    )
    list_parser.add_argument(
        "--model",
        dest="model_type",
        default="",
        help="Filter by model family (llama, falcon, phi, mistral, tuning)",
    )
    list_parser.set_defaults(
        func=lambda args: PresetOptions(config_flags, args.model_type).run_list()
    )
    parser.set_defaults(func=lambda args: parser.print_help())
    return parser