import re


def slugify(value):
    """Contract target: lower-case, dash-separated slug of ``value``."""
    if not isinstance(value, str) or not value.strip():
        raise SystemExit("slugify: empty input")
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    if not slug:
        return "", 2
    return slug
