#!/usr/bin/env python3
"""
Size statistics for encoded catalogs.

Uses tiktoken to estimate how many tokens a catalog costs as JSON versus as
an encoded stream, next to plain character and byte counts.
"""

import json
import logging
from dataclasses import asdict, dataclass

import tiktoken

from .catalog import Catalog, sorted_keys, sorted_locales

logger = logging.getLogger(__name__)


@dataclass
class SizeReport:
    """Sizes of one catalog in its JSON and encoded forms."""
    locales: int
    keys: int
    values: int
    json_chars: int
    json_bytes: int
    encoded_chars: int
    encoded_bytes: int
    json_tokens: int
    encoded_tokens: int

    @property
    def ratio(self) -> float:
        """Encoded size relative to JSON size, in UTF-8 bytes."""
        if not self.json_bytes:
            return 0.0
        return round(self.encoded_bytes / self.json_bytes, 4)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["ratio"] = self.ratio
        return data


class SizeEstimator:
    """
    Measures catalogs and their encodings.

    Token counts come from tiktoken when the encoding can be loaded, and
    from a ~4 chars per token estimate otherwise.
    """

    def __init__(self, model: str = "cl100k_base"):
        """
        Initialize estimator.

        Args:
            model: Tiktoken encoding name (default: cl100k_base)
        """
        self.model = model

        # get_encoding downloads the BPE file on first use; offline it fails
        try:
            self.encoder = tiktoken.get_encoding(model)
        except Exception as e:
            logger.warning("Tiktoken encoding %s unavailable, estimating 4 chars per token: %s", model, e)
            self.encoder = None

    def estimate_tokens(self, text: str) -> int:
        """
        Estimate token count for text.

        Args:
            text: Text to estimate tokens for

        Returns:
            Estimated token count
        """
        if self.encoder:
            return len(self.encoder.encode(text, disallowed_special=()))
        # Fallback: ~4 chars per token (rough estimate)
        return len(text) // 4

    def measure(self, catalog: Catalog, stream: str) -> SizeReport:
        """
        Compare a catalog's JSON form with its encoded stream.

        Args:
            catalog: Source catalog
            stream: Encoded stream of the catalog

        Returns:
            SizeReport
        """
        as_json = json.dumps(catalog, ensure_ascii=False, separators=(",", ":"))

        return SizeReport(
            locales=len(sorted_locales(catalog)),
            keys=len(sorted_keys(catalog)),
            values=sum(len(strings) for strings in catalog.values() if strings),
            json_chars=len(as_json),
            json_bytes=len(as_json.encode("utf-8")),
            encoded_chars=len(stream),
            encoded_bytes=len(stream.encode("utf-8", "surrogatepass")),
            json_tokens=self.estimate_tokens(as_json),
            encoded_tokens=self.estimate_tokens(stream),
        )
