#!/usr/bin/env python3
"""
YAML format handler for Rails/Symfony style i18n files.

The root mapping is keyed by locale; below it, strings are nested.
"""

from typing import Any

import yaml

from .base import FormatHandler


class YamlHandler(FormatHandler):
    """
    Handler for YAML i18n files (Rails/Symfony style).

    YAML i18n structure:
    ```yaml
    en:
      welcome: Welcome
      user:
        greeting: "Hello %{name}"
    fr:
      welcome: Bienvenue
    ```

    A file without the locale level can be parsed for a given locale.
    """

    @property
    def name(self) -> str:
        return "yaml"

    @property
    def file_extensions(self) -> list[str]:
        return ["yml", "yaml"]

    def load(self, content: str) -> Any:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}")

    def serialize(self, data: dict) -> str:
        return yaml.dump(
            data,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
