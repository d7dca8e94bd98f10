import re
import string
import time


# Base36 digits for key suffixes
CHARSET = string.digits + string.ascii_lowercase  # 0-9a-z


def to_base36(number: int) -> str:
    """Encode a non-negative integer in lowercase base36"""
    if number < 0:
        raise ValueError("Cannot encode negative numbers")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(CHARSET[remainder])
    return "".join(reversed(digits))


def generate_blog_slug(title: str) -> str:
    """
    Build a URL slug from a blog title.

    Drops punctuation, turns whitespace runs into single hyphens.
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    return re.sub(r"-+", "-", slug)


def generate_prelanding_key(headline: str, now_ms: int = None) -> str:
    """
    Build a unique-ish pre-landing key: ``<slug>-<base36 millis>``.

    Args:
        headline: Pre-landing headline
        now_ms: Timestamp in milliseconds (defaults to the current time)

    Returns:
        Lowercase key safe for use in a URL path
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)

    base = re.sub(r"[^a-z0-9]+", "-", headline.lower()).strip("-")
    suffix = to_base36(now_ms)
    return f"{base}-{suffix}" if base else suffix
