"""
Report the launch fields the platform declined to honor.

The launch response carries an ``ignored_fields`` object keyed by the
platform's internal field names. Only the keys matter; each is translated
to the attribute name users see before being reported.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

# Internal field name -> user-facing attribute name
IGNORED_FIELD_ALIASES: Mapping[str, str] = MappingProxyType({
    "inventory": "inventory",
})


def report_ignored_fields(
    ignored: Optional[Mapping[str, Any]],
    aliases: Mapping[str, str] = IGNORED_FIELD_ALIASES,
) -> Optional[Tuple[str, ...]]:
    """
    Translate an ignored-fields map into the names to show the user.

    Args:
        ignored: Field name -> ignored value, as reported by the platform
        aliases: Rename table; names not in it pass through unchanged

    Returns:
        Tuple of names in sorted key order, or None when nothing was ignored

    Examples:
        >>> report_ignored_fields({"inventory": 3})
        ('inventory',)
        >>> report_ignored_fields({}) is None
        True
    """
    if not ignored:
        return None
    return tuple(aliases.get(name, name) for name in sorted(ignored))
