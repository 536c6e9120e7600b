from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

# Lines per page used by the page estimate.
LINES_PER_PAGE = 55


class LineType(str, Enum):
    SCENE = "Scene"
    ACTION = "Action"
    CHARACTER = "Character"
    PARENTHESIS = "Parenthesis"
    DIALOGUE = "Dialogue"
    TRANSITION = "Transition"
    SHOT = "Shot"
    TEXT = "Text"
    NEW_ACT = "New Act"
    END_ACT = "End Act"
    DUAL_DIALOGUE = "Dual Dialogue"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def alignment(self) -> str:
        return _ALIGNMENT.get(self, "left")

    @property
    def indent(self) -> float:
        return _INDENT.get(self, 0.0)

    @property
    def uppercase(self) -> bool:
        return self in _UPPERCASE

    @property
    def default_next(self) -> "LineType":
        return _DEFAULT_NEXT[self]

    def render(self, text: str) -> str:
        """Return text as displayed for this type (uppercased when forced)."""
        return text.upper() if self.uppercase else text

    @classmethod
    def from_name(cls, name: Optional[str], default: Optional["LineType"] = None) -> "LineType":
        """Look a type up by display name or member name, case-insensitively."""
        fallback = cls.ACTION if default is None else default
        if not name:
            return fallback
        key = name.strip().lower()
        for member in cls:
            if key in (member.value.lower(), member.name.lower()):
                return member
        return fallback


_ALIGNMENT = {
    LineType.CHARACTER: "center",
    LineType.PARENTHESIS: "center",
}

# Horizontal offset from the left margin, in points.
_INDENT = {
    LineType.CHARACTER: 60.0,
    LineType.PARENTHESIS: 80.0,
    LineType.DIALOGUE: 40.0,
    LineType.DUAL_DIALOGUE: 40.0,
}

_UPPERCASE = frozenset({
    LineType.SCENE,
    LineType.CHARACTER,
    LineType.TRANSITION,
    LineType.SHOT,
    LineType.NEW_ACT,
    LineType.END_ACT,
})

_DEFAULT_NEXT = {
    LineType.SCENE: LineType.ACTION,
    LineType.ACTION: LineType.CHARACTER,
    LineType.CHARACTER: LineType.DIALOGUE,
    LineType.PARENTHESIS: LineType.DIALOGUE,
    LineType.DIALOGUE: LineType.CHARACTER,
    LineType.TRANSITION: LineType.SCENE,
    LineType.SHOT: LineType.ACTION,
    LineType.TEXT: LineType.TEXT,
    LineType.NEW_ACT: LineType.SCENE,
    LineType.END_ACT: LineType.SCENE,
    LineType.DUAL_DIALOGUE: LineType.DIALOGUE,
}


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TextStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False

    def to_record(self) -> Dict[str, bool]:
        return {
            "bold": self.bold,
            "italic": self.italic,
            "underline": self.underline,
            "strikethrough": self.strikethrough,
        }

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> "TextStyle":
        record = record or {}
        return cls(
            bold=bool(record.get("bold", False)),
            italic=bool(record.get("italic", False)),
            underline=bool(record.get("underline", False)),
            strikethrough=bool(record.get("strikethrough", False)),
        )


@dataclass
class Line:
    type: LineType
    text: str
    style: TextStyle = field(default_factory=TextStyle)
    id: str = field(default_factory=_new_id)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Line id is immutable")
        super().__setattr__(name, value)

    @property
    def display_text(self) -> str:
        return self.type.render(self.text)


@dataclass
class Document:
    """A screenplay: ordered typed lines plus title/author metadata.

    Every mutation made through the methods below refreshes `updated_at`.
    Assigning to `lines` directly does not; call `touch()` afterwards.
    """

    title: str
    lines: List[Line] = field(default_factory=list)
    author: Optional[str] = None
    is_external: bool = False
    updated_at: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=_new_id)

    @property
    def page_estimate(self) -> int:
        return max(1, len(self.lines) // LINES_PER_PAGE + 1)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[Line]:
        return iter(self.lines)

    def touch(self) -> None:
        self.updated_at = _utcnow()

    def set_title(self, title: str) -> None:
        self.title = title
        self.touch()

    def line(self, line_id: str) -> Line:
        for ln in self.lines:
            if ln.id == line_id:
                return ln
        raise KeyError(line_id)

    def index_of(self, line_id: str) -> int:
        for idx, ln in enumerate(self.lines):
            if ln.id == line_id:
                return idx
        raise KeyError(line_id)

    def append_line(
        self,
        text: str = "",
        type: Optional[LineType] = None,
        style: Optional[TextStyle] = None,
    ) -> Line:
        """Append a line; without an explicit type, follow the previous line's default next type."""
        if type is None:
            type = self.lines[-1].type.default_next if self.lines else LineType.SCENE
        ln = Line(type=type, text=text, style=style or TextStyle())
        self.lines.append(ln)
        self.touch()
        return ln

    def insert_line(self, index: int, line: Line) -> Line:
        self.lines.insert(index, line)
        self.touch()
        return line

    def remove_line(self, line_id: str) -> Line:
        ln = self.lines.pop(self.index_of(line_id))
        self.touch()
        return ln

    def update_line(
        self,
        line_id: str,
        text: Optional[str] = None,
        type: Optional[LineType] = None,
        style: Optional[TextStyle] = None,
    ) -> Line:
        ln = self.line(line_id)
        if text is not None:
            ln.text = text
        if type is not None:
            ln.type = type
        if style is not None:
            ln.style = style
        self.touch()
        return ln

    def copy(self) -> "Document":
        return copy.deepcopy(self)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "updated_at": self.updated_at.isoformat(),
            "is_external": self.is_external,
            "lines": [
                {"id": ln.id, "type": ln.type.value, "text": ln.text, "style": ln.style.to_record()}
                for ln in self.lines
            ],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Document":
        lines = [
            Line(
                type=LineType.from_name(item.get("type")),
                text=str(item.get("text", "")),
                style=TextStyle.from_record(item.get("style")),
                id=item.get("id") or _new_id(),
            )
            for item in record.get("lines", [])
        ]
        updated = record.get("updated_at")
        return cls(
            title=str(record.get("title", "")),
            lines=lines,
            author=record.get("author"),
            is_external=bool(record.get("is_external", False)),
            updated_at=datetime.fromisoformat(updated) if updated else _utcnow(),
            id=record.get("id") or _new_id(),
        )


def new_document(title: str = "Untitled", author: Optional[str] = None) -> Document:
    """Blank screenplay template: a single empty scene heading."""
    return Document(title=title, author=author, lines=[Line(type=LineType.SCENE, text="")])


_SAMPLE_TITLE = "Signal From The Garage"
_SAMPLE_LINES = (
    (LineType.SCENE, "INT. GARAGE - DAY"),
    (LineType.ACTION, "Dust hangs in the sunlight as a DIY film crew tweaks their lights."),
    (LineType.CHARACTER, "BILL"),
    (LineType.PARENTHESIS, "(smirking)"),
    (LineType.DIALOGUE, "We need to see all of the facts."),
    (LineType.CHARACTER, "TED"),
    (LineType.DIALOGUE, "We don't have time."),
    (LineType.ACTION, "A phone buzzes, the shot shaky but alive."),
    (LineType.SHOT, "CLOSE ON PHONE"),
    (LineType.DIALOGUE, "Just roll."),
    (LineType.TRANSITION, "CUT TO:"),
    (LineType.SCENE, "EXT. CITY ROOFTOP - NIGHT"),
    (LineType.ACTION, "Neon hums as the crew captures the skyline."),
    (LineType.NEW_ACT, "ACT II"),
    (LineType.ACTION, "Momentum builds and the edit takes shape."),
    (LineType.END_ACT, "END ACT II"),
)


def sample_document() -> Document:
    """Starter screenplay shown when the user's library is empty."""
    return Document(
        title=_SAMPLE_TITLE,
        lines=[Line(type=t, text=text) for t, text in _SAMPLE_LINES],
    )
