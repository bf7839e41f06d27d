"""
Name collation shared by the list endpoint and the client sync layer.

Dishes are listed by name using a locale-insensitive approximation of
browser `localeCompare`: accents and case are ignored at the first level,
the raw name breaks ties so the order is total and deterministic.
"""

import unicodedata
from typing import Any, Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")


def name_collation_key(name: str) -> Tuple[str, str]:
    decomposed = unicodedata.normalize("NFKD", name or "")
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name or "")


def sort_by_name(items: Iterable[T], name_of: Callable[[T], Any]) -> List[T]:
    """Return items ordered by their name's collation key (stable)."""
    return sorted(items, key=lambda item: name_collation_key(name_of(item)))
