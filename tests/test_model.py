from datetime import datetime, timezone

import pytest

from scriptio.docs.model import (
    LINES_PER_PAGE,
    Document,
    Line,
    LineType,
    TextStyle,
    new_document,
    sample_document,
)


def _doc_with(n: int) -> Document:
    return Document(title="t", lines=[Line(type=LineType.ACTION, text=str(i)) for i in range(n)])


def test_page_estimate():
    assert _doc_with(0).page_estimate == 1
    assert _doc_with(LINES_PER_PAGE - 1).page_estimate == 1
    assert _doc_with(LINES_PER_PAGE + 1).page_estimate == 2
    assert _doc_with(3 * LINES_PER_PAGE).page_estimate == 4


def test_page_estimate_follows_line_count():
    doc = _doc_with(LINES_PER_PAGE + 1)
    doc.remove_line(doc.lines[0].id)
    doc.remove_line(doc.lines[0].id)
    assert doc.page_estimate == 1


def test_default_next_table():
    assert LineType.SCENE.default_next == LineType.ACTION
    assert LineType.CHARACTER.default_next == LineType.DIALOGUE
    assert LineType.TRANSITION.default_next == LineType.SCENE
    assert LineType.DIALOGUE.default_next == LineType.CHARACTER
    assert LineType.TEXT.default_next == LineType.TEXT
    assert all(isinstance(lt.default_next, LineType) for lt in LineType)


def test_display_attributes():
    assert LineType.CHARACTER.uppercase and LineType.SCENE.uppercase
    assert not LineType.DIALOGUE.uppercase
    assert LineType.CHARACTER.alignment == "center"
    assert LineType.ACTION.alignment == "left"
    assert LineType.DIALOGUE.indent > LineType.ACTION.indent == 0


def test_uppercase_is_presentation_only():
    line = Line(type=LineType.CHARACTER, text="john")
    assert line.display_text == "JOHN"
    assert line.text == "john"


def test_line_id_is_immutable():
    line = Line(type=LineType.ACTION, text="x")
    with pytest.raises(AttributeError):
        line.id = "other"
    line.text = "y"
    line.type = LineType.SHOT
    assert line.text == "y" and line.type == LineType.SHOT


def test_append_line_uses_default_next():
    doc = Document(title="t")
    first = doc.append_line("INT. HOUSE - DAY")
    assert first.type == LineType.SCENE
    assert doc.append_line("Rain.").type == LineType.ACTION
    assert doc.append_line("JOHN").type == LineType.CHARACTER
    assert doc.append_line("Hi.").type == LineType.DIALOGUE
    assert doc.append_line("CUT TO:", type=LineType.TRANSITION).type == LineType.TRANSITION


def test_mutations_touch_updated_at():
    old = datetime(2000, 1, 1, tzinfo=timezone.utc)
    doc = new_document("Draft")
    line_id = doc.lines[0].id

    doc.updated_at = old
    doc.set_title("Final")
    assert doc.updated_at > old

    doc.updated_at = old
    doc.update_line(line_id, text="INT. LAB - NIGHT", style=TextStyle(bold=True))
    assert doc.updated_at > old
    assert doc.line(line_id).style.bold

    doc.updated_at = old
    doc.insert_line(0, Line(type=LineType.TEXT, text="note"))
    assert doc.updated_at > old
    assert doc.index_of(line_id) == 1


def test_unknown_line_id_raises_key_error():
    doc = new_document()
    with pytest.raises(KeyError):
        doc.remove_line("missing")
    with pytest.raises(KeyError):
        doc.update_line("missing", text="x")


def test_new_document_template():
    doc = new_document("Pilot", author="Sam")
    assert doc.title == "Pilot" and doc.author == "Sam"
    assert len(doc.lines) == 1
    assert doc.lines[0].type == LineType.SCENE
    assert not doc.is_external


def test_sample_document_is_fresh_each_call():
    a = sample_document()
    b = sample_document()
    assert [ln.text for ln in a] == [ln.text for ln in b]
    assert not {ln.id for ln in a} & {ln.id for ln in b}
    assert a.lines[0].type == LineType.SCENE
    assert len(a) == 16


def test_record_round_trip():
    doc = sample_document()
    doc.author = "Ted"
    doc.lines[1].style = TextStyle(italic=True, strikethrough=True)
    restored = Document.from_record(doc.to_record())
    assert restored == doc


def test_from_record_unknown_type_falls_back_to_action():
    doc = Document.from_record({"title": "x", "lines": [{"type": "Montage", "text": "m"}]})
    assert doc.lines[0].type == LineType.ACTION
    assert doc.lines[0].style == TextStyle()


def test_copy_is_deep():
    doc = sample_document()
    clone = doc.copy()
    clone.lines[0].text = "changed"
    assert doc.lines[0].text == "INT. GARAGE - DAY"
    assert clone.lines[0].id == doc.lines[0].id
