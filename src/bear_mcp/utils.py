"""Utility functions for the Bear MCP server."""
from typing import Iterable, Optional


def escape_like_pattern(value: str) -> str:
    """Escape SQL LIKE wildcards to treat them as literals.

    Prevents SQL LIKE pattern injection where user input containing
    '%' or '_' could match unintended patterns.

    Args:
        value: User input string that may contain LIKE wildcards

    Returns:
        String with '%', '_', and '\\' escaped for safe use in LIKE clauses

    Example:
        >>> escape_like_pattern("100% complete")
        '100\\% complete'
        >>> escape_like_pattern("file_name")
        'file\\_name'
    """
    # Use str.translate() for single-pass efficiency
    escape_table = str.maketrans(
        {
            "\\": "\\\\",  # Escape backslash first
            "%": "\\%",
            "_": "\\_",
        }
    )
    return value.translate(escape_table)


def format_hashtag(tag: str) -> str:
    """Render a tag name the way Bear's note parser expects it.

    Single-word tags become ``#tag``. Tags containing whitespace use Bear's
    closed form ``#multi word tag#`` so the parser keeps the words together.
    A leading '#' in the input is not doubled.

    Examples:
        "work" -> "#work"
        "#work" -> "#work"
        "reading list" -> "#reading list#"
    """
    name = tag.strip().lstrip("#").strip()
    if any(c.isspace() for c in name):
        return f"#{name.rstrip('#')}#"
    return f"#{name}"


def format_tag_line(tags: Optional[Iterable[str]]) -> str:
    """Join tags into a single space-separated hashtag line.

    Blank tags are dropped. Returns an empty string when nothing is left.
    """
    if not tags:
        return ""
    return " ".join(
        format_hashtag(tag) for tag in tags if tag and tag.strip().lstrip("#").strip()
    )
