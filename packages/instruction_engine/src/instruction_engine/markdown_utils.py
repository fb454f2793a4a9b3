"""Markdown frontmatter helpers."""

from __future__ import annotations

import json


def parse_frontmatter(text: str) -> tuple[dict[str, str], str]:
    """Parse YAML-style frontmatter from a markdown string."""
    lines = text.splitlines()
    if not lines or lines[0].strip() != "---":
        return {}, text
    for idx in range(1, len(lines)):
        if lines[idx].strip() == "---":
            meta: dict[str, str] = {}
            for line in lines[1:idx]:
                if ":" not in line:
                    continue
                key, value = line.split(":", 1)
                meta[key.strip()] = value.strip().strip("\"'")
            return meta, "\n".join(lines[idx + 1 :])
    return {}, text


def parse_list(value: str | None) -> list[str]:
    """Parse a comma-separated or JSON list value."""
    if not value:
        return []
    raw = value.strip()
    if raw.startswith("["):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
        raw = raw.strip("[]")
    return [item.strip().strip("\"'") for item in raw.split(",") if item.strip()]
