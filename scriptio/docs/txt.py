from __future__ import annotations

from typing import List

from scriptio.errors import ParseFailure

from .classify import lines_from_text
from .model import Document, Line, LineType


def _decode_utf8(data: bytes, title: str) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseFailure(
            f"Text file is not valid UTF-8: {exc.reason} at byte {exc.start}",
            details={"title": title},
        ) from exc


def decode_txt(data: bytes, title: str = "Untitled") -> Document:
    """Plain text screenplay: every non-empty line is classified."""
    return Document(title=title, lines=lines_from_text(_decode_utf8(data, title)), is_external=True)


def decode_untyped(data: bytes, title: str = "Untitled") -> Document:
    """Fallback for unknown extensions: one `text` line per non-empty input line."""
    lines: List[Line] = []
    for raw in _decode_utf8(data, title).splitlines():
        stripped = raw.strip()
        if stripped:
            lines.append(Line(type=LineType.TEXT, text=stripped))
    return Document(title=title, lines=lines, is_external=True)


def encode_txt(doc: Document) -> bytes:
    rendered = [line.display_text for line in doc.lines]
    return ("\n".join(rendered) + "\n").encode("utf-8") if rendered else b""
