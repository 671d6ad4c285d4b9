"""
Small helpers shared across services.
"""

from slugify import slugify

SLUG_MAX_LENGTH = 30
DEFAULT_SLUG = "company"


def create_slug(company_name: str, max_length: int = SLUG_MAX_LENGTH) -> str:
    """
    Create a URL-safe slug from a company name.

    The result is lowercase, contains only [a-z0-9-], has no leading or
    trailing hyphens and is at most max_length characters.
    """
    return slugify(company_name or "", max_length=max_length) or DEFAULT_SLUG


def disambiguate_slug(base: str, taken: set, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Return base, or base with the smallest free numeric suffix (-2, -3, ...)."""
    if base not in taken:
        return base

    n = 2
    while True:
        suffix = f"-{n}"
        stem = slugify(base, max_length=max_length - len(suffix)) or DEFAULT_SLUG
        candidate = stem + suffix
        if candidate not in taken:
            return candidate
        n += 1


def conversion_rate(leads: int, visitors: int) -> float:
    """Leads per unique visitor, as a percentage rounded to one decimal."""
    if visitors <= 0:
        return 0.0
    return round(leads / visitors * 100, 1)
