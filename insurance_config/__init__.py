"""
insurance_config -- single public entrypoint for underwriting rules.

Responsibility:
    Provides the ONLY way to obtain underwriting rules at runtime through
    ``get_underwriting_rules()``.  YAML loading is internal tooling and
    never exposed to registry code.

Architecture position:
    Configuration -- sits beside ``insurance_kernel``.  The kernel domain
    layer MUST NEVER import from ``insurance_config``; only the registry
    service resolves its default rules through this entrypoint.

Failure modes:
    - ``FileNotFoundError`` -- no rule set with the requested name.
    - ``ValueError`` -- unknown keys or invalid values in the rule set.

Audit relevance:
    Every successful call emits an ``UNDERWRITING_CONFIG_TRACE`` log entry
    carrying the rule set name, version and checksum, tying every priced
    contract back to the rules that governed it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from insurance_config.loader import compute_checksum, load_yaml_file, parse_rules
from insurance_config.schema import UnderwritingRules

_logger = logging.getLogger("insurance_kernel.config")

# Default rule sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

__all__ = ["UnderwritingRules", "get_underwriting_rules"]


def get_underwriting_rules(
    name: str = "default",
    config_dir: Path | None = None,
) -> UnderwritingRules:
    """The ONLY public rules entrypoint.

    Args:
        name: Rule set name; resolves to ``<config_dir>/<name>.yaml``.
        config_dir: Override path to the rule sets directory.
            Defaults to insurance_config/sets/.

    Returns:
        Frozen ``UnderwritingRules``.

    Raises:
        FileNotFoundError: If no rule set with this name exists.
        ValueError: If the rule set fails validation.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{name}.yaml"
    if not path.exists():
        raise FileNotFoundError(f"No underwriting rule set named {name!r} in {sets_dir}")

    rules = parse_rules(load_yaml_file(path), name=name)

    _logger.info(
        "UNDERWRITING_CONFIG_TRACE",
        extra={
            "rules_name": rules.name,
            "rules_version": rules.version,
            "checksum": compute_checksum(rules),
        },
    )
    return rules
