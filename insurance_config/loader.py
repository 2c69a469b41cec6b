"""
Underwriting Rules Loader (``insurance_config.loader``).

Responsibility
--------------
Loads YAML rule set files and parses them into the frozen
``insurance_config.schema.UnderwritingRules`` dataclass.  The single
public entry point for runtime rules is
``insurance_config.get_underwriting_rules()``.

Invariants enforced
-------------------
* Ratios are parsed from their string form into ``Decimal`` -- YAML
  floats are rejected so ``0.02`` can never turn into ``0.0200000004``.
* Unknown keys are rejected; missing keys fall back to schema defaults.
* ``compute_checksum`` produces a deterministic SHA-256 hash for rule set
  identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key, float ratio or invalid value  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from insurance_config.schema import UnderwritingRules

_DECIMAL_FIELDS = frozenset({
    "vehicle_min_annual_rate",
    "vehicle_coverage_ratio",
    "total_loss_ratio",
})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(key: str, value: Any) -> Decimal:
    """Parse a ratio written as a quoted string or an integer."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValueError(
            f"{key} must be written as a quoted decimal string, got {value!r}"
        )
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"{key} is not a valid decimal: {value!r}") from e


def parse_rules(data: dict[str, Any], name: str = "default") -> UnderwritingRules:
    """
    Parse an ``UnderwritingRules`` from a dict.

    Raises:
        ValueError: on unknown keys or invalid values.
    """
    known = {f.name for f in fields(UnderwritingRules)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown underwriting rule keys: {', '.join(unknown)}")

    kwargs: dict[str, Any] = {"name": data.get("name", name)}
    for key, value in data.items():
        if key == "name":
            continue
        if key in _DECIMAL_FIELDS:
            kwargs[key] = parse_decimal(key, value)
        else:
            kwargs[key] = int(value)
    return UnderwritingRules(**kwargs)


def compute_checksum(rules: UnderwritingRules) -> str:
    """Deterministic SHA-256 over the canonical JSON form of the rules."""
    canonical = json.dumps(asdict(rules), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
