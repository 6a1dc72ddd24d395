"""The ``deploy`` command: create a Kaito workspace for inference."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field

from kaitoctl.kube import AlreadyExistsError, ConfigError, KubeError
from kaitoctl.workspace import resolve_namespace

DEFAULT_INSTANCE_TYPE = "Standard_NC24ads_A100_v4"
DEFAULT_PRESET = "base"

SHORT = "Deploy an AI model for inference using Kaito"
LONG = """Deploy an AI model for inference using Kaito workspaces.

This command creates a Kaito workspace that automatically provisions GPU nodes
and sets up the inference server for the specified model."""
EXAMPLE = """  # Deploy llama-3 model with 1 GPU
  kubectl kaito deploy --name workspace-llama-3 --model llama-3-8b-instruct --gpus 1 --preset instruct

  # Deploy falcon-7b model with specific instance type
  kubectl kaito deploy --name workspace-falcon-7b --model falcon-7b-instruct --instance-type Standard_NC24ads_A100_v4

  # Preview deployment without creating resources
  kubectl kaito deploy --name workspace-test --model llama-2-7b --dry-run"""


def _format_labels(labels) -> str:
    return "map[" + " ".join(f"{key}:{labels[key]}" for key in sorted(labels)) + "]"


@dataclass
class DeployOptions:
    config_flags: object = None
    name: str = ""
    model: str = ""
    gpus: int = 1
    preset: str = ""
    instance_type: str = ""
    namespace: str = "default"
    label_selector: dict = field(default_factory=dict)
    dry_run: bool = False

    def complete(self):
        """Fill in the namespace, instance type, preset and label selector."""
        self.namespace = resolve_namespace(self.namespace, self.config_flags)
        if not self.instance_type:
            self.instance_type = DEFAULT_INSTANCE_TYPE
        if not self.preset:
            self.preset = DEFAULT_PRESET
        self.label_selector = {"apps": self.model}

    def validate(self):
        """Raise ``ValueError`` if a required option is missing or invalid."""
        if not self.name:
            raise ValueError("name is required")
        if not self.model:
            raise ValueError("model is required")
        if self.gpus < 1:
            raise ValueError("gpus must be at least 1")

    @property
    def preset_name(self) -> str:
        return f"{self.model}-{self.preset}"

    def build_workspace(self) -> dict:
        """Return the workspace object this deployment creates."""
        return {
            "apiVersion": "kaito.sh/v1beta1",
            "kind": "Workspace",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "resource": {
                    "count": self.gpus,
                    "instanceType": self.instance_type,
                    "labelSelector": {"matchLabels": dict(self.label_selector)},
                },
                "inference": {"preset": {"name": self.preset_name}},
            },
        }

    def _dry_run_text(self) -> str:
        lines = [
            "🔍 Dry-run mode: Showing what would be created",
            "",
            "Workspace Configuration:",
            "========================",
            f"Name: {self.name}",
            f"Namespace: {self.namespace}",
            f"Model: {self.preset_name}",
            f"GPUs: {self.gpus}",
            f"Instance Type: {self.instance_type}",
            f"Label Selector: {_format_labels(self.label_selector)}",
            "",
            "✓ Workspace definition is valid",
            "ℹ️  Run without --dry-run to create the workspace",
        ]
        return "\n".join(lines)

    def run(self):
        """Create the workspace, or only describe it in dry-run mode."""
        workspace = self.build_workspace()
        if self.dry_run:
            print(self._dry_run_text())
            return

        try:
            client = self.config_flags.to_client()
        except ConfigError as exc:
            raise ConfigError(f"failed to get REST config: {exc}") from exc

        print(f"Creating workspace {self.name} in namespace {self.namespace}...")
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

        print(f"✓ Successfully created workspace {self.name}")
        print(f"Model: {self.preset_name}")
        print(f"GPUs: {self.gpus}")
        print(f"Instance Type: {self.instance_type}")
        print(f"Namespace: {self.namespace}")
        print()
        print(f"Monitor the deployment with: kubectl kaito status {self.name}")


def _execute(args, config_flags):
    options = DeployOptions(
        config_flags=config_flags,
        name=args.name,
        model=args.model,
        gpus=args.gpus,
        preset=args.preset,
        instance_type=args.instance_type,
        namespace=args.namespace,
        dry_run=args.dry_run,
    )
    options.complete()
    options.validate()
    options.run()


def add_deploy_command(subparsers, config_flags):
    """Register the ``deploy`` command."""
    parser = subparsers.add_parser(
        "deploy",
        help=SHORT,
        description=LONG,
        epilog=EXAMPLE,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--name", required=True, help="Name of the workspace (required)")
    parser.add_argument("--model", required=True, help="Model name (required)")
    parser.add_argument("--gpus", type=int, default=1, help="Number of GPUs")
    parser.add_argument("--preset", default="", help="Model preset (e.g., instruct, base)")
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
        help="Preview deployment without creating resources",
    )
    parser.set_defaults(func=lambda args: _execute(args, config_flags))
    return parser