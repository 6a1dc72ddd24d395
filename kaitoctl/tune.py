"""The ``tune`` command: create a Kaito workspace for fine-tuning."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field

from kaitoctl.kube import AlreadyExistsError, ConfigError, KubeError
from kaitoctl.workspace import resolve_namespace

DEFAULT_INSTANCE_TYPE = "Standard_NC24ads_A100_v4"
DEFAULT_PRESET = "qlora"

SHORT = "Fine-tune an AI model using Kaito"
LONG = """Fine-tune an AI model using Kaito workspaces.

This command creates a Kaito workspace for fine-tuning an existing model
with your custom dataset."""
EXAMPLE = """  # Fine-tune llama-2 model with custom dataset
  kubectl kaito tune --name workspace-llama-2-tune --model llama-2-7b --dataset gs://teamA-ds --preset qlora

  # Fine-tune with specific instance type
  kubectl kaito tune --name my-tuned-model --model falcon-7b --dataset s3://my-bucket/data --instance-type Standard_NC24ads_A100_v4

  # Preview fine-tuning configuration
  kubectl kaito tune --name test-tune --model phi-2 --dataset gs://test-data --preset lora --dry-run"""


def _format_labels(labels) -> str:
    return "map[" + " ".join(f"{key}:{labels[key]}" for key in sorted(labels)) + "]"


@dataclass
class TuneOptions:
    config_flags: object = None
    name: str = ""
    base_model: str = ""
    dataset: str = ""
    preset: str = DEFAULT_PRESET
    instance_type: str = ""
    namespace: str = "default"
    label_selector: dict = field(default_factory=dict)
    dry_run: bool = False

    def complete(self):
        """Fill in the namespace, instance type and label selector."""
        self.namespace = resolve_namespace(self.namespace, self.config_flags)
        if not self.instance_type:
            self.instance_type = DEFAULT_INSTANCE_TYPE
        self.label_selector = {"apps": f"{self.base_model}-tune"}

    def validate(self):
        """Raise ``ValueError`` if a required option is missing."""
        if not self.name:
            raise ValueError("name is required")
        if not self.base_model:
            raise ValueError("model is required")
        if not self.dataset:
            raise ValueError("dataset is required")

    def build_workspace(self) -> dict:
        """Return the fine-tuning workspace object this command creates."""
        return {
            "apiVersion": "kaito.sh/v1beta1",
            "kind": "Workspace",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "resource": {
                    "count": 1,
                    "instanceType": self.instance_type,
                    "labelSelector": {"matchLabels": dict(self.label_selector)},
                },
                "tuning": {
                    "preset": {"name": self.preset},
                    "method": "qlora",
                    "input": {"urls": [self.dataset]},
                    "output": {"adapters": {"enabled": True}},
                },
            },
        }

    def _dry_run_text(self) -> str:
        lines = [
            "🔍 Dry-run mode: Showing what would be created for fine-tuning",
            "",
            "Fine-tuning Workspace Configuration:",
            "====================================",
            f"Name: {self.name}",
            f"Namespace: {self.namespace}",
            f"Base Model: {self.base_model}",
            f"Dataset: {self.dataset}",
            f"Preset: {self.preset}",
            f"Instance Type: {self.instance_type}",
            f"Label Selector: {_format_labels(self.label_selector)}",
            "",
            "✓ Fine-tuning workspace definition is valid",
            "ℹ️  Run without --dry-run to start fine-tuning",
        ]
        return "\n".join(lines)

    def run(self):
        """Create the fine-tuning workspace, or only describe it in dry-run mode."""
        workspace = self.build_workspace()
        if self.dry_run:
            print(self._dry_run_text())
            return

        try:
            client = self.config_flags.to_client()
        except ConfigError as exc:
            raise ConfigError(f"failed to get REST config: {exc}") from exc

        print(f"Creating fine-tuning workspace {self.name} in namespace {self.namespace}...")
        try:
            client.create_workspace(self.namespace, workspace)
        except AlreadyExistsError as exc:
            raise AlreadyExistsError(
                f"workspace {self.name} already exists in namespace {self.namespace}",
                status=exc.status,
                reason=exc.reason,
            ) from exc
        except KubeError as exc:
            raise KubeError(
                f"failed to create workspace: {exc}", status=exc.status, reason=exc.reason
            ) from exc

        print(f"✓ Successfully created fine-tuning workspace {self.name}")
        print(f"Base Model: {self.base_model}")
        print(f"Dataset: {self.dataset}")
        print(f"Preset: {self.preset}")
        print(f"Instance Type: {self.instance_type}")
        print(f"Namespace: {self.namespace}")
        print()
        print(f"Monitor the fine-tuning with: kubectl kaito status {self.name}")


def _execute(args, config_flags):
    options = TuneOptions(
        config_flags=config_flags,
        name=args.name,
        base_model=args.model,
        dataset=args.dataset,
        preset=args.preset,
        instance_type=args.instance_type,
        namespace=args.namespace,
        dry_run=args.dry_run,
    )
    options.complete()
    options.validate()
    options.run()


def add_tune_command(subparsers, config_flags):
    """Register the ``tune`` command."""
    parser = subparsers.add_parser(
        "tune",
        help=SHORT,
        description=LONG,
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--name", required=True, help="Name of the workspace (required)")
    parser.add_argument("--model", required=True, help="Base model name (required)")
    parser.add_argument("--dataset", required=True, help="Dataset location (required)")
    parser.add_argument(
        "--preset", default=DEFAULT_PRESET, help="Fine-tuning preset (default: qlora)"
    )
    parser.add_argument(
        "--instance-type",
        dest="instance_type",
        default="",
        help="Azure VM instance type for GPU nodes",
    )
    parser.add_argument("-n", "--namespace", default="default", help="Kubernetes namespace")
    parser.add_argument(
        "--dry-run",
        dest="dry_run",
        action="store_true",
        help="Preview fine-tuning configuration without creating resources",
    )
    parser.set_defaults(func=lambda args: _execute(args, config_flags))
    return parser