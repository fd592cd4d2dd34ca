"""
Generación de slugs para la tienda pública del vendedor.

El slug es la primera palabra del nombre, en minúsculas, sin tildes y sin
caracteres no alfanuméricos ("María José" -> "maria"). Las colisiones se
resuelven con un sufijo numérico incremental ("maria2", "maria3", ...).
"""
import re
import unicodedata
from typing import Callable, Iterable, Optional

DEFAULT_SLUG = "vendedor"

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def strip_accents(value: str) -> str:
    normalized = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def base_slug(name: Optional[str]) -> str:
    """Slug sin sufijo derivado del nombre"""
    words = (name or "").strip().split()
    if not words:
        return DEFAULT_SLUG
    cleaned = _NON_ALNUM.sub("", strip_accents(words[0]).lower())
    return cleaned or DEFAULT_SLUG


def slug_matches_name(slug: Optional[str], name: Optional[str]) -> bool:
    """True si `slug` es el slug base del nombre o el base con sufijo numérico"""
    if not slug:
        return False
    base = base_slug(name)
    if slug == base:
        return True
    suffix = slug[len(base):] if slug.startswith(base) else ""
    return suffix.isdigit() and int(suffix) >= 2


def unique_slug(name: Optional[str], taken: Callable[[str], bool]) -> str:
    """
    Primer slug libre para `name`.

    Args:
        name: Nombre del vendedor
        taken: Predicado que indica si un slug ya está en uso

    Returns:
        `base`, o `base2`, `base3`... según el primero disponible
    """
    base = base_slug(name)
    if not taken(base):
        return base
    n = 2
    while taken(f"{base}{n}"):
        n += 1
    return f"{base}{n}"


def unique_slug_from(name: Optional[str], existing: Iterable[str]) -> str:
    used = set(existing)
    return unique_slug(name, lambda candidate: candidate in used)
