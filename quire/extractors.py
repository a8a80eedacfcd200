"""Front matter extraction for Quire pages."""

from __future__ import annotations

import re
from typing import Any

import yaml

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n?---\s*(?:\n|$)", re.DOTALL)


def extract_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Extract YAML front matter from a page template.

    Args:
        text: Raw file content.

    Returns:
        Tuple of (front matter dict, remaining content). Content without a
        front matter block, or whose block is not a mapping, yields an empty
        dict.

    Raises:
        yaml.YAMLError: If the front matter block is not valid YAML.
    """
    match = FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        return {}, text[match.end() :]
    return data, text[match.end() :]
