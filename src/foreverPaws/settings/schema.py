"""Schema helpers for the application settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import DEFAULT_JPEG_QUALITY, DEFAULT_MAX_SCALE, MIN_SCALE

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "ForeverPaws/settings.schema.json",
    "type": "object",
    "required": ["schema", "crop"],
    "properties": {
        "schema": {"const": "ForeverPaws/settings@1"},
        "library_path": {"type": ["string", "null"]},
        "crop": {
            "type": "object",
            "properties": {
                "max_scale": {"type": "number", "minimum": MIN_SCALE, "maximum": 20},
                "zoom_policy": {
                    "type": "string",
                    "enum": ["multiplicative", "absolute"],
                },
                "clamp_mode": {
                    "type": "string",
                    "enum": ["rect", "independent"],
                },
                "jpeg_quality": {"type": "integer", "minimum": 1, "maximum": 95},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "ForeverPaws/settings@1",
    "library_path": None,
    "crop": {
        "max_scale": DEFAULT_MAX_SCALE,
        "zoom_policy": "multiplicative",
        "clamp_mode": "rect",
        "jpeg_quality": DEFAULT_JPEG_QUALITY,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key == "crop" and isinstance(value, dict):
                target = merged.setdefault("crop", {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            if key == "library_path" and isinstance(value, (str, os.PathLike)):
                merged[key] = os.fspath(value) or None
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults"]
