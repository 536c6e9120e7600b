"""Import/export orchestration: map format identifiers to codecs, normalize errors.

No format-specific logic lives here beyond extension and magic-byte lookup.
"""

from __future__ import annotations

import atexit
import os
import re
import zipfile
from typing import Callable, Dict, NamedTuple, Optional, Tuple

from lxml import etree

from scriptio.config import get_settings
from scriptio.errors import IOFailure, ParseFailure, ScriptIOError, UnsupportedFormat
from scriptio.logconf import get_logger

from .buffer import ExportBuffer, atomic_write
from .docx_io import decode_docx, encode_docx
from .fdx_io import decode_fdx, encode_fdx
from .model import Document
from .pdf_io import decode_pdf, encode_pdf
from .txt import decode_txt, decode_untyped, encode_txt

logger = get_logger(__name__)


class Codec(NamedTuple):
    name: str
    extensions: Tuple[str, ...]
    decode: Callable[[bytes, str], Document]
    encode: Callable[[Document], bytes]


CODECS: Dict[str, Codec] = {
    "fdx": Codec("fdx", (".fdx",), decode_fdx, encode_fdx),
    "docx": Codec("docx", (".docx",), decode_docx, encode_docx),
    "pdf": Codec("pdf", (".pdf",), decode_pdf, encode_pdf),
    "txt": Codec("txt", (".txt",), decode_txt, encode_txt),
}

_BY_EXTENSION: Dict[str, str] = {ext: c.name for c in CODECS.values() for ext in c.extensions}
_UNSAFE_FILENAME = re.compile(r'[\\/:*?"<>|\x00-\x1f]')

_session_buffer: Optional[ExportBuffer] = None


def detect_format(path: str) -> Optional[str]:
    ext = os.path.splitext(path)[1].lower()
    return _BY_EXTENSION.get(ext)


def sniff_format(data: bytes) -> Optional[str]:
    """Guess a format from leading bytes; None when nothing matches."""
    head = data[:1024].lstrip()
    if head.startswith(b"%PDF-"):
        return "pdf"
    if head.startswith(b"PK\x03\x04"):
        return "docx"
    if head.startswith(b"\xef\xbb\xbf"):
        head = head[3:].lstrip()
    if head.startswith(b"<") and b"<FinalDraft" in head:
        return "fdx"
    return None


def _normalize_format(fmt: str) -> str:
    return (fmt or "").strip().lower().lstrip(".")


def get_codec(fmt: str) -> Codec:
    key = _normalize_format(fmt)
    try:
        return CODECS[key]
    except KeyError:
        raise UnsupportedFormat(
            f"Unsupported format: {fmt!r}",
            hint=f"Supported formats: {', '.join(sorted(CODECS))}",
        ) from None


def _guarded(action: str, func, *args):
    """Run a codec call, mapping stray library errors onto the shared taxonomy."""
    try:
        return func(*args)
    except ScriptIOError:
        raise
    except OSError as exc:
        raise IOFailure(f"{action} failed: {exc}") from exc
    except (ValueError, KeyError, RuntimeError, etree.LxmlError, zipfile.BadZipFile) as exc:
        raise ParseFailure(f"{action} failed: {exc}") from exc


def import_bytes(
    data: bytes,
    fmt: Optional[str],
    title: str = "Untitled",
    allow_plain_text: Optional[bool] = None,
) -> Document:
    """Decode an in-memory file with the codec registered for fmt.

    Doxygen:
    - @param data: Raw file content.
    - @param fmt: Format identifier (fdx|docx|pdf|txt) or None when unknown.
    - @param title: Title of the resulting document.
    - @param allow_plain_text: Enable the untyped plain-text fallback for unknown
      formats; None uses the configured policy.
    - @return: A fresh Document.
    - @throws UnsupportedFormat: Unknown format and fallback disabled.
    - @throws ParseFailure: Content does not match the selected codec.
    """
    key = _normalize_format(fmt) if fmt else ""
    if key not in CODECS:
        if allow_plain_text is None:
            allow_plain_text = get_settings().allow_plain_text_fallback
        if not allow_plain_text:
            raise UnsupportedFormat(
                f"Unsupported format for '{title}': {fmt or 'unknown'}",
                hint=f"Supported formats: {', '.join(sorted(CODECS))}",
            )
        logger.warning("Unknown format %r for '%s'; importing as untyped plain text", fmt, title)
        return _guarded("Plain text import", decode_untyped, data, title)

    codec = CODECS[key]
    doc = _guarded(f"{codec.name.upper()} import", codec.decode, data, title)
    logger.info("Imported '%s' as %s: %d lines", title, codec.name, len(doc.lines))
    return doc


def import_document(path: str, allow_plain_text: Optional[bool] = None) -> Document:
    """Read a file from disk and decode it by extension (or content sniff)."""
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise IOFailure(f"Cannot read {path}: {exc}", details={"path": path}) from exc

    title = os.path.splitext(os.path.basename(path))[0] or "Untitled"
    fmt = detect_format(path) or sniff_format(data)
    return import_bytes(data, fmt, title=title, allow_plain_text=allow_plain_text)


def export_document(doc: Document, fmt: str) -> bytes:
    codec = get_codec(fmt)
    data = _guarded(f"{codec.name.upper()} export", codec.encode, doc)
    logger.info("Exported '%s' as %s (%d bytes)", doc.title, codec.name, len(data))
    return data


def export_filename(doc: Document, fmt: str) -> str:
    stem = _UNSAFE_FILENAME.sub("", doc.title or "").strip().replace(" ", "_").strip(".") or "Untitled"
    return f"{stem}.{_normalize_format(fmt)}"


def export_buffer() -> ExportBuffer:
    """Session hand-off directory, created on first use and removed at exit."""
    global _session_buffer
    if _session_buffer is None:
        _session_buffer = ExportBuffer()
        atexit.register(_session_buffer.cleanup)
        logger.debug("Export buffer at %s", _session_buffer.base_dir)
    return _session_buffer


def save_export(doc: Document, fmt: str, out_dir: Optional[str] = None) -> str:
    """Encode doc and write it atomically to out_dir (the session export buffer by default).

    Returns the path of the written file, ready for hand-off.
    """
    data = export_document(doc, fmt)
    name = export_filename(doc, fmt)
    if not out_dir:
        return export_buffer().write_atomic(name, data)
    return atomic_write(os.path.join(out_dir, name), data)
