import pytest

from scriptio.docs.model import Document, Line, LineType
from scriptio.docs.txt import decode_txt, decode_untyped, encode_txt
from scriptio.errors import ParseFailure


def test_decode_txt_classifies_lines():
    doc = decode_txt("\ufeffINT. HOUSE - DAY\r\n\r\nJOHN\r\nHello.\r\n".encode("utf-8"), title="notes")
    assert [ln.type for ln in doc.lines] == [LineType.SCENE, LineType.CHARACTER, LineType.ACTION]
    assert doc.lines[0].text == "INT. HOUSE - DAY"
    assert doc.title == "notes"


def test_decode_untyped_yields_text_lines():
    doc = decode_untyped(b"INT. HOUSE - DAY\n\n  JOHN  \n")
    assert [(ln.type, ln.text) for ln in doc.lines] == [
        (LineType.TEXT, "INT. HOUSE - DAY"),
        (LineType.TEXT, "JOHN"),
    ]


def test_invalid_utf8_raises_parse_failure():
    with pytest.raises(ParseFailure):
        decode_txt(b"\xff\xfe\xfa bad")


def test_encode_txt_renders_display_text():
    doc = Document(title="x", lines=[Line(type=LineType.CHARACTER, text="john"), Line(type=LineType.DIALOGUE, text="Hi.")])
    assert encode_txt(doc) == b"JOHN\nHi.\n"
    assert encode_txt(Document(title="empty")) == b""
