"""Schema helpers for the georeview settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import (
    COMMIT_MAX_WORKERS,
    DEFAULT_PAGE_SIZE,
    EXACT_MATCH_TOLERANCE_SEC,
    MAX_INTERPOLATION_GAP_SEC,
    REFETCH_DELAY_MS,
)

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "georeview/settings.schema.json",
    "type": "object",
    "required": ["schema", "review", "estimator"],
    "properties": {
        "schema": {"const": "georeview/settings@1"},
        "seen_store_path": {"type": ["string", "null"]},
        "review": {
            "type": "object",
            "properties": {
                "page_size": {"type": "integer", "minimum": 1, "maximum": 1000},
                "refetch_delay_ms": {"type": "integer", "minimum": 0},
                "commit_workers": {"type": "integer", "minimum": 1, "maximum": 64},
                "hide_rest_by_default": {"type": "boolean"},
            },
            "additionalProperties": True,
        },
        "estimator": {
            "type": "object",
            "properties": {
                "exact_tolerance_sec": {"type": "number", "minimum": 0},
                "max_interpolation_gap_sec": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "georeview/settings@1",
    "seen_store_path": None,
    "review": {
        "page_size": DEFAULT_PAGE_SIZE,
        "refetch_delay_ms": REFETCH_DELAY_MS,
        "commit_workers": COMMIT_MAX_WORKERS,
        "hide_rest_by_default": False,
    },
    "estimator": {
        "exact_tolerance_sec": EXACT_MATCH_TOLERANCE_SEC,
        "max_interpolation_gap_sec": MAX_INTERPOLATION_GAP_SEC,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_SECTIONS = ("review", "estimator")


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            if key == "seen_store_path":
                if value in {None, ""}:
                    merged[key] = None
                    continue
                try:
                    merged[key] = os.fspath(value)
                except TypeError:
                    continue
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
