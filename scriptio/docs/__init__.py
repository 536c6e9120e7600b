"""Screenplay document layer (FDX, DOCX, PDF, TXT).

Exposes:
- Data model: Document, Line, LineType, TextStyle
- Classifier: classify, lines_from_text
- Codecs: decode_*/encode_* per format, selected through CODECS
- Orchestration: import_document, import_bytes, export_document, save_export
- Export buffer: ExportBuffer and export_buffer() (session temp directory that
  save_export writes to when no output directory is given)
"""

from .model import (
    LINES_PER_PAGE,
    Document,
    Line,
    LineType,
    TextStyle,
    new_document,
    sample_document,
)
from .classify import classify, lines_from_text
from .buffer import ExportBuffer, atomic_write
from .pipeline import (
    CODECS,
    Codec,
    detect_format,
    export_buffer,
    export_document,
    get_codec,
    import_bytes,
    import_document,
    save_export,
    sniff_format,
)

__all__ = [
    "LINES_PER_PAGE",
    "Document",
    "Line",
    "LineType",
    "TextStyle",
    "new_document",
    "sample_document",
    "classify",
    "lines_from_text",
    "ExportBuffer",
    "atomic_write",
    "CODECS",
    "Codec",
    "detect_format",
    "export_buffer",
    "export_document",
    "get_codec",
    "import_bytes",
    "import_document",
    "save_export",
    "sniff_format",
]
