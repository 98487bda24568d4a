"""Text normalization for comparison fields."""

import re
import unicodedata

from app.config import ReconciliationSettings

_WHITESPACE_RUN = re.compile(r"\s+")


class TextNormalizer:
    """Applies the configured case, whitespace and punctuation transforms.

    Transforms run in a fixed order: case folding, whitespace collapsing,
    punctuation stripping. Each one only runs when enabled.
    """

    def __init__(
        self,
        normalize_case: bool = True,
        collapse_whitespace: bool = True,
        strip_punctuation: bool = False,
    ):
        self.normalize_case = normalize_case
        self.collapse_whitespace = collapse_whitespace
        self.strip_punctuation = strip_punctuation

    @classmethod
    def from_settings(cls, config: ReconciliationSettings) -> "TextNormalizer":
        return cls(
            normalize_case=config.normalize_case,
            collapse_whitespace=config.collapse_whitespace,
            strip_punctuation=config.strip_punctuation,
        )

    def normalize(self, value: str | None) -> str | None:
        """Normalize a text value. None is returned unchanged."""
        if value is None:
            return None

        out = value
        if self.normalize_case:
            out = out.lower()
        if self.collapse_whitespace:
            out = _WHITESPACE_RUN.sub(" ", out.strip())
        if self.strip_punctuation:
            out = "".join(ch for ch in out if not unicodedata.category(ch).startswith("P"))
        return out
