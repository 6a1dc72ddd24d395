"""Helpers for reading workspace objects and workspace references."""

from __future__ import annotations


def nested_get(obj, *args):
    """Follow ``args`` as keys through nested mappings; ``None`` if a step is missing."""
    current = obj
    for key in args:
        if not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def extract_string_value(obj, *args) -> str:
    """Return the string at the nested path, or an empty string."""
    value = nested_get(obj, *args)
    return value if isinstance(value, str) else ""


def extract_condition_status(status, condition_type) -> str:
    """Return the status of the condition of the given type, or ``"Unknown"``."""
    conditions = nested_get(status, "conditions")
    if not isinstance(conditions, list):
        return "Unknown"
    for condition in conditions:
        if not isinstance(condition, dict):
            continue
        if extract_string_value(condition, "type") == condition_type:
            return extract_string_value(condition, "status")
    return "Unknown"


def parse_workspace_ref(ref: str) -> str:
    """Return the workspace name from ``name`` or ``workspace/name``."""
    if "/" not in ref:
        return ref
    parts = ref.split("/")
    if len(parts) == 2 and parts[0] == "workspace":
        return parts[1]
    raise ValueError(f"invalid workspace reference format: {ref}")


def resolve_namespace(namespace, config_flags) -> str:
    """Pick the explicit namespace, else the global one, else ``default``."""
    if namespace:
        return namespace
    if config_flags is not None and config_flags.namespace:
        return config_flags.namespace
    return "default"