"""Heuristic line classifier for text that carries no explicit line type.

Used for plain text, PDF-extracted text and DOCX paragraphs.
"""

from __future__ import annotations

from typing import Callable, List

from .model import Line, LineType

SCENE_PREFIXES = ("INT.", "EXT.", "INT/", "I/E")
CHARACTER_MAX_LEN = 18


def classify(raw_line: str) -> LineType:
    """Guess the LineType of one line of unstructured text.

    Doxygen:
    - @param raw_line: Line text; surrounding whitespace is ignored.
    - @return: The first matching type, in priority order: empty → action,
      scene prefix, "ACT ", "END ACT", "(...)", short all-caps → character,
      trailing colon → transition, otherwise action.
    """
    text = (raw_line or "").strip()
    if not text:
        return LineType.ACTION
    if text.startswith(SCENE_PREFIXES):
        return LineType.SCENE
    if text.startswith("ACT "):
        return LineType.NEW_ACT
    if text.startswith("END ACT"):
        return LineType.END_ACT
    if text.startswith("(") and text.endswith(")"):
        return LineType.PARENTHESIS
    # checked before the colon rule: "CUT TO:" lands here as character
    if text == text.upper() and len(text) <= CHARACTER_MAX_LEN:
        return LineType.CHARACTER
    if text.endswith(":"):
        return LineType.TRANSITION
    return LineType.ACTION


def lines_from_text(text: str, classifier: Callable[[str], LineType] = classify) -> List[Line]:
    """Split text on newlines, trim, drop blanks and build one typed Line per remaining line."""
    lines: List[Line] = []
    for raw in (text or "").splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        lines.append(Line(type=classifier(stripped), text=stripped))
    return lines
