import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str | None, fallback: str = "page") -> str:
    """Turn a page or case-study title into a URL-safe key.

    Lowercases, collapses every run of characters outside ``[a-z0-9]`` into
    a single hyphen and strips hyphens from both ends.

    Args:
        text: Title or path to slugify.
        fallback: Returned when nothing alphanumeric remains.

    Returns:
        str: Slug such as ``"checkout-redesign"``.
    """
    slug = _NON_ALNUM.sub("-", str(text or "").lower()).strip("-")
    return slug or fallback
