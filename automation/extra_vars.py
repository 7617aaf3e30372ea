"""
Extra variables handling.

Extra variables are supplied as text, either JSON or YAML. The text is
sent to the platform as-is; it is only parsed here to validate it and to
compare two versions semantically, so that re-serializing the same
variables (JSON to YAML, key reordering, whitespace) is not a change.
"""

from typing import Any, Dict, Optional

import yaml


class ExtraVarsError(ValueError):
    """Extra variables text is not a JSON or YAML mapping."""
    pass


def parse_extra_vars(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse extra variables text into a dict.

    YAML is a superset of JSON, so one safe_load covers both formats.
    Empty or missing text parses to an empty dict.

    Raises:
        ExtraVarsError: Text is not valid YAML/JSON or its root is not a mapping
    """
    if text is None or not text.strip():
        return {}

    try:
        value = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ExtraVarsError(f"Extra variables must be a JSON or YAML string: {e}") from e

    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ExtraVarsError(
            f"Extra variables must be a JSON or YAML mapping, got {type(value).__name__}"
        )
    return value


def validate_extra_vars(text: Optional[str]) -> Optional[str]:
    """Return ``text`` unchanged after checking that it parses."""
    parse_extra_vars(text)
    return text


def extra_vars_equal(a: Optional[str], b: Optional[str]) -> bool:
    """True if both texts describe the same variables."""
    if a == b:
        return True
    try:
        return parse_extra_vars(a) == parse_extra_vars(b)
    except ExtraVarsError:
        return False
