#!/usr/bin/env python3
"""
Reading and writing encoded streams.

END_VALUE and ADD_VALUE_RTL are "\\n" and "\\r", so stream files must be read
and written with newline translation turned off.
"""

from pathlib import Path
from typing import Union


def read_stream(path: Union[str, Path]) -> str:
    """Read an encoded stream file as-is."""
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_stream(path: Union[str, Path], stream: str) -> Path:
    """Write an encoded stream file as-is, returning its path."""
    path = Path(path)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(stream)
    return path
