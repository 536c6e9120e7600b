"""Final Draft (FDX) XML codec.

Only paragraph type and text travel through this format; TextStyle is not
written and is reset to defaults on decode.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from lxml import etree

from scriptio.errors import ParseFailure
from scriptio.logconf import get_logger

from .model import Document, Line, LineType

logger = get_logger(__name__)

FDX_TYPE_NAMES: Dict[LineType, str] = {
    LineType.SCENE: "Scene Heading",
    LineType.ACTION: "Action",
    LineType.CHARACTER: "Character",
    LineType.PARENTHESIS: "Parenthetical",
    LineType.DIALOGUE: "Dialogue",
    LineType.TRANSITION: "Transition",
    LineType.SHOT: "Shot",
    LineType.TEXT: "Text",
    LineType.NEW_ACT: "Act",
    LineType.END_ACT: "End of Act",
    LineType.DUAL_DIALOGUE: "Dual Dialogue",
}

_TYPES_BY_NAME: Dict[str, LineType] = {name.lower(): lt for lt, name in FDX_TYPE_NAMES.items()}
# names written by older exports
_TYPES_BY_NAME.update({"new act": LineType.NEW_ACT, "end act": LineType.END_ACT})

_CHUNK_SIZE = 64 * 1024
_XML_INVALID = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def fdx_type_to_line_type(name: str | None) -> LineType:
    if not name:
        return LineType.ACTION
    return _TYPES_BY_NAME.get(name.strip().lower(), LineType.ACTION)


@dataclass
class _ParagraphState:
    type: LineType
    parts: List[str] = field(default_factory=list)


@dataclass
class _FdxAccumulator:
    """Parse state threaded through the pull loop."""

    open_paragraphs: List[_ParagraphState] = field(default_factory=list)
    title_page_depth: int = 0
    lines: List[Line] = field(default_factory=list)

    def start_paragraph(self, type_name: str | None) -> None:
        self.open_paragraphs.append(_ParagraphState(type=fdx_type_to_line_type(type_name)))

    def add_text(self, text: str) -> None:
        if self.open_paragraphs:
            self.open_paragraphs[-1].parts.append(text)

    def end_paragraph(self) -> None:
        if not self.open_paragraphs:
            return
        para = self.open_paragraphs.pop()
        text = "".join(para.parts).strip()
        if text:
            self.lines.append(Line(type=para.type, text=text))


def _local(tag) -> str:
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname


def _handle_event(acc: _FdxAccumulator, event: str, elem) -> None:
    name = _local(elem.tag)
    if name == "TitlePage":
        acc.title_page_depth += 1 if event == "start" else -1
        return
    if acc.title_page_depth:
        return

    if event == "start":
        if name == "Paragraph":
            acc.start_paragraph(elem.get("Type"))
        return

    if name == "Text":
        acc.add_text("".join(elem.itertext()))
    elif name == "Paragraph":
        acc.end_paragraph()
        elem.clear(keep_tail=True)


def _iter_chunks(data: bytes) -> List[bytes]:
    return [data[i:i + _CHUNK_SIZE] for i in range(0, len(data), _CHUNK_SIZE)]


def decode_fdx(data: bytes, title: str = "Untitled") -> Document:
    """Parse FDX bytes into a fresh Document.

    Doxygen:
    - @param data: Raw FDX file content.
    - @param title: Title for the new document (usually the file base name).
    - @return: Document flagged as external, one Line per non-empty Paragraph.
    - @throws ParseFailure: If the XML is not well formed.
    """
    parser = etree.XMLPullParser(
        events=("start", "end"),
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    acc = _FdxAccumulator()
    try:
        for chunk in _iter_chunks(data):
            parser.feed(chunk)
            for event, elem in parser.read_events():
                _handle_event(acc, event, elem)
        parser.close()
        for event, elem in parser.read_events():
            _handle_event(acc, event, elem)
    except etree.XMLSyntaxError as exc:
        raise ParseFailure(
            f"Malformed FDX document: {exc}",
            hint="The file is not well-formed XML.",
            details={"title": title},
        ) from exc

    logger.debug("Decoded FDX '%s': %d lines", title, len(acc.lines))
    return Document(title=title, lines=acc.lines, is_external=True)


def xml_safe(text: str) -> str:
    """Drop characters that XML 1.0 cannot carry."""
    return _XML_INVALID.sub("", text)


def encode_fdx(doc: Document) -> bytes:
    root = etree.Element("FinalDraft", DocumentType="Script", Template="No", Version="1")
    content = etree.SubElement(root, "Content")
    for line in doc.lines:
        para = etree.SubElement(content, "Paragraph", Type=FDX_TYPE_NAMES[line.type])
        text_el = etree.SubElement(para, "Text")
        text_el.text = xml_safe(line.text)
    logger.debug("Encoded FDX '%s': %d paragraphs", doc.title, len(doc.lines))
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=False, pretty_print=True)

