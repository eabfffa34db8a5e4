from typing import Iterable, Optional

FALLBACK_BASE_NAME = "My Wishlist"


def default_base_name(display_name: Optional[str]) -> str:
    display_name = (display_name or "").strip()
    if not display_name:
        return FALLBACK_BASE_NAME
    return f"{display_name}'s Wishlist"


def next_default_name(base: str, existing: Iterable[str]) -> str:
    """Smallest free candidate among "Base", "Base 2", "Base 3", ..."""
    taken = set(existing)
    if base not in taken:
        return base
    suffix = 2
    while f"{base} {suffix}" in taken:
        suffix += 1
    return f"{base} {suffix}"
