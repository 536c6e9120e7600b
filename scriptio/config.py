import json
import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any, Dict, Optional

from scriptio.logconf import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "settings.json")
CONFIG_ENV = "SCRIPTIO_CONFIG"


@dataclass(frozen=True)
class PdfLayout:
    """Fixed page geometry for PDF export, in points."""

    page_width: float = 612.0
    page_height: float = 792.0
    margin: float = 72.0
    font: str = "cour"
    # Optional TrueType/OpenType file drawn instead of the built-in font.
    font_file: Optional[str] = None
    font_size: float = 12.0
    line_height: float = 20.0

    @property
    def text_width(self) -> float:
        return self.page_width - 2 * self.margin


@dataclass(frozen=True)
class Settings:
    allow_plain_text_fallback: bool = True
    pdf: PdfLayout = field(default_factory=PdfLayout)


def _resolve_path(path: Optional[str]) -> str:
    if path:
        return os.path.abspath(path)
    env = os.environ.get(CONFIG_ENV)
    if env:
        return os.path.abspath(env)
    return CONFIG_PATH


def _pdf_from_dict(raw: Dict[str, Any]) -> PdfLayout:
    values: Dict[str, Any] = {}
    for name in ("page_width", "page_height", "margin", "font_size", "line_height"):
        if name in raw:
            values[name] = float(raw[name])
    if raw.get("font"):
        values["font"] = str(raw["font"])
    if raw.get("font_file"):
        font_file = str(raw["font_file"])
        values["font_file"] = font_file if os.path.isabs(font_file) else os.path.join(PROJECT_ROOT, font_file)
    layout = replace(PdfLayout(), **values)
    if layout.text_width <= 0 or layout.line_height <= 0:
        raise ValueError("PDF layout leaves no room for text")
    return layout


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from config/settings.json (or $SCRIPTIO_CONFIG).

    A missing or invalid file is not fatal: a warning is logged and the
    built-in defaults are returned.
    """
    cfg_path = _resolve_path(path)
    if not os.path.exists(cfg_path):
        logger.warning("Settings file not found at %s; using defaults", cfg_path)
        return Settings()

    try:
        with open(cfg_path, "r", encoding="utf-8") as cfg_file:
            raw = json.load(cfg_file) or {}
        return Settings(
            allow_plain_text_fallback=bool(raw.get("allow_plain_text_fallback", True)),
            pdf=_pdf_from_dict(raw.get("pdf") or {}),
        )
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Could not load settings from %s: %s; using defaults", cfg_path, exc)
        return Settings()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
