"""
Field validators shared by the bookmark and tag schemas.

Length limits are read from Settings on every call so a deployment can tune
them through the environment.
"""
import re
from urllib.parse import urlparse

from core.config import get_settings

# Lowercase words joined by single hyphens, e.g. 'machine-learning'
TAG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

ALLOWED_URL_SCHEMES = frozenset({"http", "https"})

# Width of the tags.name column
MAX_TAG_LENGTH = 100


def validate_and_normalize_tag(tag: str) -> str:
    """
    Lowercase and trim a tag name, then check its format.

    Raises:
        ValueError: If the name is empty, too long or not in TAG_PATTERN form.
    """
    name = tag.strip().lower()
    if not name:
        raise ValueError("Tag name cannot be empty")
    _check_length(name, MAX_TAG_LENGTH, "Tag name")
    if TAG_PATTERN.fullmatch(name) is None:
        raise ValueError(
            f"Invalid tag format: '{name}'. "
            "Use lowercase letters, numbers, and hyphens only (e.g., 'machine-learning').",
        )
    return name


def validate_and_normalize_tags(tags: list[str]) -> list[str]:
    """Normalize a list of tags, dropping blanks and repeats but keeping order."""
    names = (validate_and_normalize_tag(tag) for tag in tags if tag.strip())
    return list(dict.fromkeys(names))


def _check_length(value: str | None, limit: int, label: str) -> str | None:
    if value is not None and len(value) > limit:
        raise ValueError(
            f"{label} exceeds maximum length of {limit:,} characters "
            f"(got {len(value):,} characters).",
        )
    return value


def validate_url(url: str, field_name: str = "URL") -> str:
    """
    Check that a value is an absolute http(s) URL within the length limit.

    Only surrounding whitespace is removed. The URL is otherwise kept exactly
    as given, so 'https://example.com' does not gain a trailing slash.
    """
    url = url.strip()
    if not url:
        raise ValueError(f"{field_name} cannot be empty")
    _check_length(url, get_settings().max_url_length, field_name)
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES or not parsed.netloc:
        raise ValueError(f"{field_name} must be an absolute http(s) URL")
    return url


def validate_title_length(title: str | None) -> str | None:
    return _check_length(title, get_settings().max_title_length, "Title")


def validate_content_length(content: str | None) -> str | None:
    return _check_length(content, get_settings().max_content_length, "Content")


def validate_summary_length(summary: str | None) -> str | None:
    return _check_length(summary, get_settings().max_summary_length, "Summary")
