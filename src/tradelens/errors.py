"""Error taxonomy shared across the package."""

from __future__ import annotations

from collections.abc import Sequence


class DecodeError(ValueError):
    """The workbook bytes could not be turned into sheets."""


class SchemaError(ValueError):
    """The first sheet does not carry enough known transaction headers."""

    def __init__(self, found: Sequence[str], missing: Sequence[str], required: int) -> None:
        self.found = list(found)
        self.missing = list(missing)
        self.required = required
        super().__init__(
            f"Found {len(self.found)} of {len(self.found) + len(self.missing)} transaction "
            f"columns in the first sheet (need {required}). "
            f"Missing: {', '.join(self.missing) or 'none'}"
        )


class SummaryError(RuntimeError):
    """The external summarizer failed; already computed results stay valid."""
