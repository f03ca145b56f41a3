"""
Placeholder resolution for federal region configs.

The federal descriptor is nation-wide; tokens like ${stateCode} inside its
API query params or bulk filters scope it to the active local region. The
substitution values come from the local descriptor's scalar config fields.
"""

import re
from typing import Any, Dict, Mapping, Optional

from config import get_logger

logger = get_logger(__name__).bind(component="placeholders")


PLACEHOLDER_PATTERN = re.compile(r"\$\{(\w+)\}")

# Local config fields exposed as ${key} substitutions
PLACEHOLDER_FIELDS = ("stateCode",)


def _substitute(value: str, substitutions: Mapping[str, str]) -> str:
    def replace(match: "re.Match[str]") -> str:
        key = match.group(1)
        if key in substitutions:
            return str(substitutions[key])
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, value)


def resolve_placeholders(tree: Any, substitutions: Mapping[str, str]) -> Any:
    """Replace ${key} tokens in every string leaf of a nested config tree.

    Returns a new tree of the same shape; the input is never mutated.
    Tokens with no matching substitution are left as-is.

    Args:
        tree: dicts, lists, tuples and scalars (typically parsed JSON)
        substitutions: token name -> replacement value

    Returns:
        Deep copy of tree with tokens substituted
    """
    if isinstance(tree, str):
        return _substitute(tree, substitutions)
    if isinstance(tree, Mapping):
        return {key: resolve_placeholders(value, substitutions) for key, value in tree.items()}
    if isinstance(tree, list):
        return [resolve_placeholders(item, substitutions) for item in tree]
    if isinstance(tree, tuple):
        return tuple(resolve_placeholders(item, substitutions) for item in tree)
    return tree


def placeholder_variables(local_config: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Build the substitution map from a local region config"""
    if not local_config:
        return {}

    variables = {}
    for key in PLACEHOLDER_FIELDS:
        value = local_config.get(key)
        if isinstance(value, (str, int, float)) and not isinstance(value, bool):
            variables[key] = str(value)
    return variables


def resolve_federal_config(
    federal_config: Dict[str, Any],
    local_config: Optional[Mapping[str, Any]],
) -> Dict[str, Any]:
    """Scope a federal config to the local region.

    With no local config (or one without placeholder values) the federal
    config is returned as an unchanged copy and a warning is logged.
    """
    variables = placeholder_variables(local_config)
    if not variables:
        logger.warning(
            "federal config placeholders left unresolved",
            reason="no local region config" if not local_config else "no placeholder values",
        )
        return resolve_placeholders(federal_config, {})

    logger.info("resolving federal config placeholders", variables=sorted(variables))
    return resolve_placeholders(federal_config, variables)
