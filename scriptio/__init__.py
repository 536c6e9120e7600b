"""scriptio: screenplay document model and FDX/DOCX/PDF import/export.

Packages:
- scriptio.docs: document model, classifier, codecs and the import/export pipeline
- scriptio.config: settings loaded from config/settings.json
- scriptio.errors: error taxonomy raised by every codec
"""

from scriptio.docs import (
    Document,
    Line,
    LineType,
    TextStyle,
    classify,
    export_document,
    import_bytes,
    import_document,
    new_document,
    sample_document,
    save_export,
)
from scriptio.errors import (
    CorruptContainer,
    IOFailure,
    ParseFailure,
    ScriptIOError,
    UnsupportedFormat,
)

__version__ = "0.1.0"

__all__ = [
    "Document",
    "Line",
    "LineType",
    "TextStyle",
    "classify",
    "export_document",
    "import_bytes",
    "import_document",
    "new_document",
    "sample_document",
    "save_export",
    "CorruptContainer",
    "IOFailure",
    "ParseFailure",
    "ScriptIOError",
    "UnsupportedFormat",
]
