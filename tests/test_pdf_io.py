import pymupdf
import pytest

from scriptio.config import PdfLayout
from scriptio.docs import pdf_io
from scriptio.docs.model import Document, Line, LineType
from scriptio.errors import ParseFailure


def _body_texts(doc: Document, skip: int):
    return [ln.text for ln in doc.lines[skip:]]


def test_decode_classifies_extracted_text(monkeypatch):
    monkeypatch.setattr(pdf_io, "extract_text", lambda data: "INT. HOUSE - DAY\n\nJOHN\nHello.")
    doc = pdf_io.decode_pdf(b"%PDF-stub", title="House")
    assert [ln.text for ln in doc.lines] == ["INT. HOUSE - DAY", "JOHN", "Hello."]
    assert [ln.type for ln in doc.lines] == [LineType.SCENE, LineType.CHARACTER, LineType.ACTION]
    assert doc.title == "House"
    assert doc.is_external


def test_encode_then_decode_keeps_line_text_in_order():
    doc = Document(
        title="Garage",
        author="Sam",
        lines=[
            Line(type=LineType.SCENE, text="int. garage - day"),
            Line(type=LineType.CHARACTER, text="bill"),
            Line(type=LineType.PARENTHESIS, text="(smirking)"),
            Line(type=LineType.DIALOGUE, text="We roll now."),
        ],
    )
    back = pdf_io.decode_pdf(pdf_io.encode_pdf(doc))
    assert [ln.text for ln in back.lines] == [
        "Garage",
        "by Sam",
        "INT. GARAGE - DAY",
        "BILL",
        "(smirking)",
        "We roll now.",
    ]
    assert back.lines[2].type == LineType.SCENE
    assert doc.lines[0].text == "int. garage - day"


def test_title_page_lines():
    lines = pdf_io.title_page_lines(Document(title="Pilot", author="Ann"))
    assert [ln.text for ln in lines] == ["Pilot", "by Ann", ""]
    assert all(ln.type == LineType.TEXT for ln in lines)
    assert [ln.text for ln in pdf_io.title_page_lines(Document(title="Pilot"))] == ["Pilot", ""]


def test_encode_starts_new_pages_at_bottom_margin():
    doc = Document(title="Long", lines=[Line(type=LineType.ACTION, text=f"Beat {i}.") for i in range(200)])
    layout = PdfLayout()
    data = pdf_io.encode_pdf(doc, layout=layout)
    rows_per_page = int((layout.page_height - 2 * layout.margin) // layout.line_height)
    expected_pages = -(-(200 + 2) // rows_per_page)
    with pymupdf.open(stream=data, filetype="pdf") as pdf:
        assert pdf.page_count == expected_pages
        assert pdf[0].rect.width == layout.page_width
    back = pdf_io.decode_pdf(data)
    assert _body_texts(back, 1) == [f"Beat {i}." for i in range(200)]


def test_smaller_page_layout_produces_more_pages():
    doc = Document(title="Short", lines=[Line(type=LineType.ACTION, text=f"Beat {i}.") for i in range(40)])
    default_pages = pymupdf.open(stream=pdf_io.encode_pdf(doc, layout=PdfLayout()), filetype="pdf").page_count
    small_pages = pymupdf.open(stream=pdf_io.encode_pdf(doc, layout=PdfLayout(page_height=300)), filetype="pdf").page_count
    assert small_pages > default_pages


def test_long_lines_are_wrapped_without_losing_words():
    words = [f"word{i}" for i in range(60)]
    doc = Document(title="Wrap", lines=[Line(type=LineType.ACTION, text=" ".join(words))])
    back = pdf_io.decode_pdf(pdf_io.encode_pdf(doc))
    body = _body_texts(back, 1)
    assert len(body) > 1
    assert " ".join(body).split() == words


def test_decode_garbage_raises_parse_failure():
    with pytest.raises(ParseFailure):
        pdf_io.decode_pdf(b"this is not a pdf")
    with pytest.raises(ParseFailure):
        pdf_io.decode_pdf(b"")


def test_text_outside_latin1_survives_round_trip():
    text = "Café — naïve “quote” ‘aside’ 日本"
    doc = Document(title="T", lines=[Line(type=LineType.ACTION, text=text)])
    back = pdf_io.decode_pdf(pdf_io.encode_pdf(doc))
    body = " ".join(_body_texts(back, 1))
    assert "Café — naïve “quote” ‘aside’" in body
    assert "日本" in body
    assert "·" not in body


def test_unreadable_font_file_falls_back_to_builtin_font(tmp_path):
    layout = PdfLayout(font_file=str(tmp_path / "missing.ttf"))
    doc = Document(title="Fonts", lines=[Line(type=LineType.ACTION, text="Still drawn — fine.")])
    back = pdf_io.decode_pdf(pdf_io.encode_pdf(doc, layout=layout))
    assert _body_texts(back, 1) == ["Still drawn — fine."]
