"""Error taxonomy shared by all codecs and the import/export pipeline."""

from __future__ import annotations

from typing import Any, Dict, Optional


class ScriptIOError(Exception):
    """Base class for import/export failures.

    Carries an optional hint and a details mapping so callers can show a
    readable message to the user without inspecting the cause chain.
    """

    def __init__(
        self,
        message: str,
        hint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.hint = hint
        self.details = details or {}
        super().__init__(self.format_error())

    def format_error(self) -> str:
        output = self.message
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(f"  {key}: {value}" for key, value in self.details.items())
            output += f"\nDetails:\n{details_str}"
        return output


class UnsupportedFormat(ScriptIOError):
    """Extension or content not recognized and no fallback applies."""


class ParseFailure(ScriptIOError):
    """Bytes do not conform to the schema expected by the selected codec."""


class IOFailure(ScriptIOError):
    """Reading, writing or opening the underlying storage failed."""


class CorruptContainer(ParseFailure):
    """Zip container unreadable or missing a required part."""


__all__ = [
    "ScriptIOError",
    "UnsupportedFormat",
    "ParseFailure",
    "IOFailure",
    "CorruptContainer",
]
