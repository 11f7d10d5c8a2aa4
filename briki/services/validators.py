# briki/services/validators.py
from __future__ import annotations

from typing import Any, List

# Country names the catalog and clients use interchangeably with ISO codes
_COUNTRY_ALIASES = {
    "COLOMBIA": "CO",
    "MEXICO": "MX",
    "MÉXICO": "MX",
    "WORLDWIDE": "WW",
}
WORLDWIDE = "WW"


def field(obj: Any, key: str, default: Any = None) -> Any:
    """Get attribute or dict key with the same name."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        value = obj.get(key, default)
    else:
        value = getattr(obj, key, default)
    return default if value is None else value


def as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def as_str_list(value: Any) -> List[str]:
    """Coerce a features/tags-like value to a list of strings; anything else is empty."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return [v for v in value if isinstance(v, str)]
    return []


def normalize_country(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    code = value.strip().upper()
    return _COUNTRY_ALIASES.get(code, code)
