"""Command-line tool for deploying, fine-tuning, inspecting and deleting Kaito workspaces on Kubernetes."""

__version__ = "0.1.0"