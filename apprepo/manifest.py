"""Manifest validation.

A manifest describes an installable web application. The registry only
trusts manifests that have been through a validator: something callable as
``validate(raw) -> dict`` that returns a canonical manifest or raises.
:func:`validate_manifest` is the default one.

Validation walks :data:`MANIFEST_SCHEMA`, a small JSON-Schema-like
description of the fields the registry reads, collecting every issue
rather than stopping at the first.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

from apprepo.exceptions import InvalidManifestError
from apprepo.urls import parse_origin

ManifestValidator = Callable[[Any], dict]

DEFAULT_MANIFEST_NAME = "manifest.webapp"

MANIFEST_SCHEMA: dict = {
    "type": "object",
    "required": ["name", "base_url"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "base_url": {"type": "string", "minLength": 1},
        "launch_path": {"type": "string"},
        "manifest_name": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "version": {"type": "string"},
        "icons": {
            "type": "object",
            "additionalProperties": {"type": "string"},
        },
        "developer": {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "url": {"type": "string"},
            },
        },
        "widget": {
            "type": "object",
            "properties": {
                "path": {"type": "string"},
                "width": {"type": ["integer", "string"]},
                "height": {"type": ["integer", "string"]},
            },
        },
        "capabilities": {"type": "array", "items": {"type": "string"}},
    },
}

_TYPE_MAP = {
    "string": str,
    "integer": int,
    "number": (int, float),
    "boolean": bool,
    "array": list,
    "object": dict,
}


def manifest_issues(raw: Any) -> list[str]:
    """Check *raw* against the manifest schema.

    Returns:
        List of error messages. Empty list means valid.
    """
    issues: list[str] = []
    _validate_node(raw, MANIFEST_SCHEMA, "", issues)
    if issues:
        return issues

    try:
        origin = parse_origin(raw["base_url"])
    except ValueError:
        issues.append(f".base_url: '{raw['base_url']}' is not an absolute URL")
    else:
        if origin.scheme not in ("http", "https"):
            issues.append(f".base_url: unsupported scheme '{origin.scheme}'")

    return issues


def validate_manifest(raw: Any) -> dict:
    """Validate *raw* and return its canonical form.

    The canonical manifest keeps only the properties listed in
    :data:`MANIFEST_SCHEMA`, so validating an already canonical manifest
    returns an equal dict.

    Raises:
        InvalidManifestError: if any issue is found.
    """
    issues = manifest_issues(raw)
    if issues:
        raise InvalidManifestError("; ".join(issues), issues=issues)

    known = MANIFEST_SCHEMA["properties"]
    return {key: copy.deepcopy(value) for key, value in raw.items() if key in known}


def launch_url(app: dict) -> str:
    """The URL an application is launched from, also its registry key."""
    return app["base_url"] + (app.get("launch_path") or "")


def expected_manifest_url(app: dict) -> str:
    """Where a manifest should be served from, judging by its own contents."""
    return app["base_url"] + (app.get("manifest_name") or DEFAULT_MANIFEST_NAME)


def _validate_node(data: Any, schema: dict, path: str, issues: list[str]) -> None:
    schema_type = schema.get("type")
    if schema_type and not _type_matches(data, schema_type):
        issues.append(f"{path or '/'}: expected type '{schema_type}', got {type(data).__name__}")
        return

    if isinstance(data, str):
        min_len = schema.get("minLength", 0)
        if len(data) < min_len:
            issues.append(f"{path or '/'}: string too short (min {min_len}, got {len(data)})")

    if isinstance(data, dict):
        for req in schema.get("required", []):
            if req not in data:
                issues.append(f"{path or '/'}: missing required property '{req}'")

        props = schema.get("properties", {})
        extra = schema.get("additionalProperties")
        for key, value in data.items():
            if key in props:
                _validate_node(value, props[key], f"{path}.{key}", issues)
            elif extra:
                _validate_node(value, extra, f"{path}.{key}", issues)

    if isinstance(data, list) and "items" in schema:
        for i, item in enumerate(data):
            _validate_node(item, schema["items"], f"{path}[{i}]", issues)


def _type_matches(data: Any, schema_type: str | list[str]) -> bool:
    if isinstance(schema_type, list):
        return any(_type_matches(data, t) for t in schema_type)
    expected = _TYPE_MAP.get(schema_type)
    if expected is None:
        return True
    # bool is a subclass of int, but JSON true/false is not a number
    if schema_type in ("integer", "number") and isinstance(data, bool):
        return False
    return isinstance(data, expected)
