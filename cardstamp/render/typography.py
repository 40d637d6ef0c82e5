from __future__ import annotations

import logging
import platform
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from PIL import ImageColor, ImageFont

LOGGER = logging.getLogger(__name__)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont

_RGBA_PATTERN = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*([0-9]*\.?[0-9]+)\s*)?\)$",
    re.IGNORECASE,
)


@dataclass(slots=True, frozen=True)
class FontSpec:
    size: int
    italic: bool = False


def _system_font_candidates(italic: bool = False) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        if italic:
            return [
                Path(r"C:\Windows\Fonts\segoeuii.ttf"),
                Path(r"C:\Windows\Fonts\ariali.ttf"),
            ]
        return [
            Path(r"C:\Windows\Fonts\segoeui.ttf"),
            Path(r"C:\Windows\Fonts\arial.ttf"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Avenir Next.ttc"),
            Path("/System/Library/Fonts/HelveticaNeue.ttc"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    if italic:
        return [
            Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf"),
            Path("/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf"),
            Path("/usr/share/fonts/TTF/DejaVuSans-Oblique.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
        Path("/usr/share/fonts/TTF/DejaVuSans.ttf"),
    ]


def load_font(font_path: Path | None, size: int, italic: bool = False) -> FontType:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(italic))
    if italic:
        candidates.extend(_system_font_candidates(False))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    LOGGER.warning("no TrueType font found, falling back to the Pillow default font at %dpx", size)
    return ImageFont.load_default(size=size)


class FontBook:
    """Fonts resolved once per render, keyed by size and style."""

    def __init__(self, font_path: Path | None = None, italic_font_path: Path | None = None) -> None:
        self._font_path = font_path
        self._italic_font_path = italic_font_path
        self._fonts: dict[FontSpec, FontType] = {}

    def preload(self, specs: Iterable[FontSpec]) -> None:
        for spec in specs:
            self.get(spec)

    def get(self, spec: FontSpec) -> FontType:
        font = self._fonts.get(spec)
        if font is None:
            path = self._italic_font_path if spec.italic and self._italic_font_path else self._font_path
            font = load_font(path, spec.size, italic=spec.italic)
            self._fonts[spec] = font
        return font

    def measure(self, text: str, spec: FontSpec, letter_spacing: float = 0.0) -> float:
        return spaced_text_width(self.get(spec), text, letter_spacing)


def spaced_text_width(font: FontType, text: str, letter_spacing: float = 0.0) -> float:
    """Advance width of ``text``; spacing is added after every character."""
    if not text:
        return 0.0
    if not letter_spacing:
        return float(font.getlength(text))
    return sum(float(font.getlength(ch)) for ch in text) + letter_spacing * len(text)


def ellipsize(font: FontType, text: str, max_width: float, letter_spacing: float = 0.0) -> str:
    if max_width <= 0:
        return ""
    if spaced_text_width(font, text, letter_spacing) <= max_width:
        return text
    ellipsis = "..."
    for cut in range(len(text), -1, -1):
        candidate = text[:cut].rstrip() + ellipsis
        if spaced_text_width(font, candidate, letter_spacing) <= max_width:
            return candidate
    return ellipsis


def parse_color(value: str) -> tuple[int, int, int, int]:
    """Parse CSS-style colors, including ``rgba()`` with a fractional alpha."""
    text = (value or "").strip()
    match = _RGBA_PATTERN.match(text)
    if match:
        red, green, blue = (max(0, min(255, int(match.group(i)))) for i in (1, 2, 3))
        alpha_text = match.group(4)
        alpha = 1.0 if alpha_text is None else max(0.0, min(1.0, float(alpha_text)))
        return (red, green, blue, int(round(alpha * 255)))
    return ImageColor.getcolor(text, "RGBA")  # type: ignore[return-value]

