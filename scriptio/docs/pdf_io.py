from __future__ import annotations

import os
import textwrap
from typing import Iterator, List, Optional, Tuple

import pymupdf

from scriptio.config import PdfLayout, get_settings
from scriptio.errors import ParseFailure
from scriptio.logconf import get_logger

from .classify import lines_from_text
from .model import Document, Line, LineType

logger = get_logger(__name__)


def extract_text(data: bytes) -> str:
    """Return the linear text of a PDF, pages joined in order.

    Doxygen:
    - @param data: Raw PDF bytes.
    - @return: Text of every page as produced by PyMuPDF's plain extraction.
    - @throws ParseFailure: If the PDF cannot be opened or has no pages.
    """
    try:
        pdf = pymupdf.open(stream=data, filetype="pdf")
    except (RuntimeError, ValueError) as exc:
        raise ParseFailure(f"PDF could not be opened: {exc}") from exc

    with pdf:
        if pdf.needs_pass:
            raise ParseFailure("PDF is password protected", hint="Remove the password and import again.")
        if pdf.page_count == 0:
            raise ParseFailure("PDF contains no pages")
        try:
            return "\n".join(page.get_text("text") for page in pdf)
        except (RuntimeError, ValueError) as exc:
            raise ParseFailure(f"PDF text extraction failed: {exc}") from exc


def decode_pdf(data: bytes, title: str = "Untitled") -> Document:
    lines = lines_from_text(extract_text(data))
    logger.debug("Decoded PDF '%s': %d lines", title, len(lines))
    return Document(title=title, lines=lines, is_external=True)


def title_page_lines(doc: Document) -> List[Line]:
    """Title block drawn ahead of the body: title, optional byline, one blank line."""
    out = [Line(type=LineType.TEXT, text=doc.title)]
    if doc.author:
        out.append(Line(type=LineType.TEXT, text=f"by {doc.author}"))
    out.append(Line(type=LineType.TEXT, text=""))
    return out


# Drawn for characters the primary font has no glyph for (CJK and other scripts).
FALLBACK_FONT = "cjk"


class _Fonts:
    """Primary monospaced font plus a glyph fallback, both as PyMuPDF Font objects."""

    def __init__(self, layout: PdfLayout) -> None:
        self.primary = self._load_primary(layout)
        try:
            self.fallback: Optional[pymupdf.Font] = pymupdf.Font(FALLBACK_FONT)
        except Exception as exc:  # MuPDF raises its own error types
            logger.warning("Fallback font %r unavailable: %s", FALLBACK_FONT, exc)
            self.fallback = None

    @staticmethod
    def _load_primary(layout: PdfLayout) -> pymupdf.Font:
        if layout.font_file and not os.path.isfile(layout.font_file):
            logger.warning("Font file %s not found; using %r", layout.font_file, layout.font)
        elif layout.font_file:
            try:
                return pymupdf.Font(fontfile=layout.font_file)
            except Exception as exc:  # MuPDF raises its own error types
                logger.warning("Cannot load font file %s: %s; using %r", layout.font_file, exc, layout.font)
        return pymupdf.Font(layout.font)

    def runs(self, text: str) -> List[Tuple[str, pymupdf.Font]]:
        """Split text into runs that share a font."""
        out: List[Tuple[List[str], pymupdf.Font]] = []
        for ch in text:
            font = self.primary
            if self.fallback is not None and not self.primary.has_glyph(ord(ch)) and self.fallback.has_glyph(ord(ch)):
                font = self.fallback
            if out and out[-1][1] is font:
                out[-1][0].append(ch)
            else:
                out.append(([ch], font))
        return [("".join(chars), font) for chars, font in out]


def _wrap(text: str, width_pt: float, fonts: _Fonts, layout: PdfLayout) -> List[str]:
    char_width = fonts.primary.text_length("M", fontsize=layout.font_size)
    max_chars = max(1, int(width_pt // char_width)) if char_width else len(text)
    return textwrap.wrap(text, width=max_chars, break_long_words=True, break_on_hyphens=False) or [text]


def _layout_rows(lines: List[Line], fonts: _Fonts, layout: PdfLayout) -> Iterator[Tuple[float, Optional[str]]]:
    """Yield (x offset, text) rows; text is None for a blank row."""
    for line in lines:
        rendered = line.display_text.strip()
        if not rendered:
            yield 0.0, None
            continue
        indent = min(line.type.indent, layout.text_width / 2)
        for row in _wrap(rendered, layout.text_width - indent, fonts, layout):
            yield indent, row


def _draw_row(writer: pymupdf.TextWriter, pos: pymupdf.Point, text: str, fonts: _Fonts, size: float) -> None:
    for run, font in fonts.runs(text):
        _, pos = writer.append(pos, run, font=font, fontsize=size)


def encode_pdf(doc: Document, layout: Optional[PdfLayout] = None) -> bytes:
    """Render a fixed monospaced layout, one row per line, paging at the bottom margin.

    Text goes through a TextWriter with embedded fonts so characters outside
    Latin-1 keep their own glyphs.
    """
    layout = layout or get_settings().pdf
    fonts = _Fonts(layout)
    bottom = layout.page_height - layout.margin
    pdf = pymupdf.open()
    try:
        page = pdf.new_page(width=layout.page_width, height=layout.page_height)
        writer = pymupdf.TextWriter(page.rect)
        y = layout.margin
        for indent, text in _layout_rows(title_page_lines(doc) + list(doc.lines), fonts, layout):
            if y + layout.line_height > bottom:
                writer.write_text(page)
                page = pdf.new_page(width=layout.page_width, height=layout.page_height)
                writer = pymupdf.TextWriter(page.rect)
                y = layout.margin
            if text is not None:
                baseline = pymupdf.Point(layout.margin + indent, y + layout.font_size)
                _draw_row(writer, baseline, text, fonts, layout.font_size)
            y += layout.line_height
        writer.write_text(page)
        logger.debug("Encoded PDF '%s': %d pages", doc.title, pdf.page_count)
        return pdf.tobytes(garbage=3, deflate=True)
    finally:
        pdf.close()
