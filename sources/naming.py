"""Helpers for naming new scripts."""

import re

DEFAULT_NAME = "Untitled Script"
MAX_NAME_LENGTH = 50

_HEADING_MARKERS = re.compile(r"^#+\s*")


def extract_title_from_content(content: str) -> str:
    """
    Derive a script name from its first non-blank line.

    Leading Markdown heading markers are stripped and long titles are
    truncated with an ellipsis.
    """
    first_line = next((line for line in content.split("\n") if line.strip()), None)
    if first_line is None:
        return DEFAULT_NAME

    title = _HEADING_MARKERS.sub("", first_line).strip()
    if not title:
        return DEFAULT_NAME

    if len(title) > MAX_NAME_LENGTH:
        return title[:MAX_NAME_LENGTH].strip() + "…"

    return title


def make_name_unique(base_name: str, existing_names: list[str]) -> str:
    """Return base_name, or base_name with the lowest free numeric suffix from 2."""
    names = set(existing_names)
    if base_name not in names:
        return base_name

    counter = 2
    while f"{base_name} {counter}" in names:
        counter += 1
    return f"{base_name} {counter}"


def generate_unique_script_name(existing_names: list[str]) -> str:
    return make_name_unique(DEFAULT_NAME, existing_names)
