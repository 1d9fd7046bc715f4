#!/usr/bin/env python3
"""
JSON format handler for catalog and string files.

Supports nested JSON structures with dot-notation flattening, and string
files whose entries are objects holding the text under "value".
"""

import json
from typing import Any

from .base import FormatHandler


class JsonHandler(FormatHandler):
    """
    Handler for JSON catalogs and per-locale string files.

    Whole catalog:
    ```json
    {
      "en": {"user": {"greeting": "Hello"}},
      "fr": {"user": {"greeting": "Bonjour"}}
    }
    ```

    Single-locale string file (parsed with a locale):
    ```json
    {
      "title": {"value": "Friction"},
      "user": {"greeting": "Hello"}
    }
    ```

    Keys are flattened to dot notation: "title", "user.greeting".
    """

    @property
    def name(self) -> str:
        return "json"

    @property
    def file_extensions(self) -> list[str]:
        return ["json"]

    def load(self, content: str) -> Any:
        if not content.strip():
            return {}
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e.msg} at line {e.lineno}")

    def serialize(self, data: dict) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
