"""Text helpers for blog slugs, reading time and upload file names."""

import math
import re
import secrets
import string

WORDS_PER_MINUTE = 200

_TAG_RE = re.compile(r"<[^>]*>")


def slugify(text: str) -> str:
    """
    Build a URL slug from a title.

    Example:
        >>> slugify("  Best Beaches in Cyprus!  ")
        'best-beaches-in-cyprus'
    """
    slug = text.strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w-]+", "", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def random_suffix(length: int = 5) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


def read_time_minutes(html: str | None) -> int:
    """Estimate reading time of an HTML body, at least one minute."""
    if not html:
        return 1
    words = _TAG_RE.sub(" ", html).split()
    return max(1, math.ceil(len(words) / WORDS_PER_MINUTE))


def safe_name(value: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return re.sub(r"[^a-zA-Z0-9]", "_", value)
