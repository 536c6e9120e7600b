from __future__ import annotations

import io
import zipfile
import zlib
from typing import List

from docx import Document as DocxDocument
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.shared import Pt
from lxml import etree

from scriptio.errors import CorruptContainer
from scriptio.logconf import get_logger

from .classify import classify
from .fdx_io import xml_safe
from .model import Document, Line

logger = get_logger(__name__)

DOCUMENT_PART = "word/document.xml"
REQUIRED_PARTS = (
    "[Content_Types].xml",
    "_rels/.rels",
    DOCUMENT_PART,
    "word/_rels/document.xml.rels",
)
FONT_NAME = "Courier New"
FONT_SIZE = Pt(12)


def _check_container(data: bytes, title: str) -> None:
    """Fail early on anything that is not a readable zip holding word/document.xml."""
    buf = io.BytesIO(data)
    if not zipfile.is_zipfile(buf):
        raise CorruptContainer("DOCX file is not a zip archive", details={"title": title})
    try:
        with zipfile.ZipFile(buf) as zf:
            if DOCUMENT_PART not in zf.namelist():
                raise CorruptContainer(
                    f"DOCX archive has no {DOCUMENT_PART}",
                    hint="The file may be a different zip-based format.",
                    details={"title": title},
                )
            bad = zf.testzip()
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, OSError) as exc:
        raise CorruptContainer(f"DOCX archive is unreadable: {exc}", details={"title": title}) from exc
    if bad is not None:
        raise CorruptContainer(f"DOCX archive entry is corrupt: {bad}", details={"title": title})


# Runs owned by the paragraph itself; text-box paragraphs nested in a run
# drawing are reached separately by the body walk.
_OWN_TEXT = (
    "./w:r/w:t"
    " | ./w:hyperlink/w:r/w:t"
    " | ./w:ins/w:r/w:t"
    " | ./w:smartTag/w:r/w:t"
    " | ./w:fldSimple/w:r/w:t"
    " | ./w:sdt/w:sdtContent/w:r/w:t"
)


def _paragraph_text(p) -> str:
    return "".join(t.text or "" for t in p.xpath(_OWN_TEXT))


def _iter_paragraphs(docx):
    """Every w:p in the body in document order, including table cells and content controls."""
    return docx.element.body.iter(qn("w:p"))


def decode_docx(data: bytes, title: str = "Untitled") -> Document:
    """Read DOCX bytes; every non-empty paragraph becomes one classified Line.

    Doxygen:
    - @param data: Raw .docx content.
    - @param title: Title for the new document.
    - @return: Document flagged as external.
    - @throws CorruptContainer: Not a zip, missing word/document.xml, or unreadable parts.
    """
    _check_container(data, title)
    try:
        docx = DocxDocument(io.BytesIO(data))
    except (PackageNotFoundError, KeyError, ValueError, etree.XMLSyntaxError, zipfile.BadZipFile) as exc:
        raise CorruptContainer(f"DOCX package could not be opened: {exc}", details={"title": title}) from exc

    lines: List[Line] = []
    for p in _iter_paragraphs(docx):
        text = _paragraph_text(p).strip()
        if not text:
            continue
        lines.append(Line(type=classify(text), text=text))
    logger.debug("Decoded DOCX '%s': %d paragraphs kept", title, len(lines))
    return Document(title=title, lines=lines, is_external=True)


def encode_docx(doc: Document) -> bytes:
    d = DocxDocument()
    normal = d.styles["Normal"]
    normal.font.name = FONT_NAME
    normal.font.size = FONT_SIZE
    for line in doc.lines:
        p = d.add_paragraph()
        p.add_run(xml_safe(line.display_text))
    out = io.BytesIO()
    d.save(out)
    logger.debug("Encoded DOCX '%s': %d paragraphs", doc.title, len(doc.lines))
    return out.getvalue()
