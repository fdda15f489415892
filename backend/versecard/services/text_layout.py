"""
Text layout for verse images.

Measures verse lines with the script's font and greedily wraps them so
every line fits inside 80% of the surface width. The layout itself is a
pure function of (text, width, script, measure); fonts are only touched
through the measure callable.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Callable, Optional

import arabic_reshaper
from bidi.algorithm import get_display
from PIL import ImageFont

from versecard.config import get_settings
from versecard.design_templates import get_script_profile
from versecard.errors import EmptyInputError, RenderContextError
from versecard.models import LayoutResult, Script, ScriptProfile

logger = logging.getLogger(__name__)

# Layout proportions
WRAP_RATIO = 0.8  # Wrap budget as a share of surface width
FONT_SCALE = 0.035  # Font size as a share of surface width
MAX_SHRINK_STEPS = 20

MeasureFn = Callable[[str, float, ScriptProfile], float]

_missing_fonts: set = set()


@lru_cache(maxsize=64)
def _load_font(path: Optional[str], size: float) -> ImageFont.FreeTypeFont:
    if path is None:
        return ImageFont.load_default(size=size)
    return ImageFont.truetype(path, size)


class FontBook:
    """Resolves script profiles to font files under the fonts directory."""

    def __init__(self, fonts_dir: Optional[str] = None):
        self.fonts_dir = Path(fonts_dir or get_settings().fonts_dir)

    def font_path(self, profile: ScriptProfile, italic: bool = False) -> Optional[Path]:
        """Path of the requested face, falling back italic -> regular -> None."""
        candidates = []
        if italic and profile.italic_file:
            candidates.append(profile.italic_file)
        candidates.append(profile.regular_file)

        for filename in candidates:
            path = self.fonts_dir / profile.font_dir / filename
            if path.exists():
                return path
            if path not in _missing_fonts:
                _missing_fonts.add(path)
                logger.warning(f"Font not found: {path}")
        return None

    def get_font(self, profile: ScriptProfile, size: float, italic: bool = False) -> ImageFont.FreeTypeFont:
        """Get the script's font at the given pixel size (Pillow default face if missing)."""
        path = self.font_path(profile, italic)
        return _load_font(str(path) if path else None, float(size))


def shaping_kwargs(profile: ScriptProfile, font: ImageFont.FreeTypeFont) -> dict:
    """Direction/language arguments for Pillow text calls, when the font is shaped by libraqm."""
    if getattr(font, "layout_engine", None) != ImageFont.Layout.RAQM:
        return {}
    return {"direction": profile.direction, "language": profile.language_tag}


def visual_text(text: str, profile: ScriptProfile, font: ImageFont.FreeTypeFont) -> str:
    """
    Text as Pillow should receive it.

    libraqm shapes and reorders right-to-left text itself. The basic layout
    engine draws code points left to right, so RTL text is joined into its
    contextual forms and put in visual order first.
    """
    if profile.direction != "rtl" or getattr(font, "layout_engine", None) == ImageFont.Layout.RAQM:
        return text
    return get_display(arabic_reshaper.reshape(text))


def pillow_measure(fonts: Optional[FontBook] = None) -> MeasureFn:
    """Measure rendered text width with Pillow and the script's font."""
    fonts = fonts or FontBook()

    def measure(text: str, font_size: float, profile: ScriptProfile) -> float:
        font = fonts.get_font(profile, font_size)
        return font.getlength(visual_text(text, profile, font), **shaping_kwargs(profile, font))

    return measure


def wrap_budget(surface_width: float) -> float:
    return surface_width * WRAP_RATIO


def base_font_size(surface_width: float, min_font_px: float) -> float:
    return max(surface_width * FONT_SCALE, min_font_px)


def shrink_step(font_size: float, width: float, budget: float) -> float:
    """Next smaller font size for text measuring `width` against `budget`."""
    return font_size * min(budget / width, 0.95)


def _fit_font_size(
    paragraphs: list[str],
    font_size: float,
    budget: float,
    profile: ScriptProfile,
    measure: MeasureFn,
) -> float:
    """Shrink the font until the widest single word fits the budget."""
    words = {word for para in paragraphs for word in para.split()}
    for _ in range(MAX_SHRINK_STEPS):
        widest = max(measure(word, font_size, profile) for word in words)
        if widest <= budget:
            return font_size
        font_size = shrink_step(font_size, widest, budget)
        logger.debug(f"Word wider than wrap budget, shrinking font to {font_size:.1f}px")
    logger.warning(f"Could not fit longest word within {budget:.0f}px")
    return font_size


def _wrap_line(
    line: str,
    font_size: float,
    budget: float,
    profile: ScriptProfile,
    measure: MeasureFn,
) -> list[str]:
    """Greedy word wrap of one paragraph line."""
    if measure(line, font_size, profile) <= budget:
        return [line]

    lines = []
    current = ""
    for word in line.split():
        candidate = f"{current} {word}" if current else word
        if measure(candidate, font_size, profile) <= budget:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def layout(
    text: str,
    surface_width: float,
    script: Script,
    measure: Optional[MeasureFn] = None,
    min_font_px: Optional[float] = None,
) -> LayoutResult:
    """
    Wrap verse text for a surface of the given width.

    Args:
        text: Verse text, explicit line breaks preserved
        surface_width: Width of the drawing surface in pixels
        script: Writing system of the text
        measure: Width function (text, font_size, profile) -> px; Pillow by default
        min_font_px: Lower bound on the proportional font size

    Returns:
        LayoutResult whose lines all measure within the wrap budget
    """
    paragraphs = [line.strip() for line in (text or "").split("\n") if line.strip()]
    if not paragraphs:
        raise EmptyInputError("Verse text is empty")
    if surface_width <= 0:
        raise RenderContextError(f"Invalid surface width: {surface_width}")

    profile = get_script_profile(script)
    measure = measure or pillow_measure()
    if min_font_px is None:
        min_font_px = get_settings().min_font_px

    budget = wrap_budget(surface_width)
    font_size = base_font_size(surface_width, min_font_px)
    font_size = _fit_font_size(paragraphs, font_size, budget, profile, measure)

    lines = []
    for para in paragraphs:
        lines.extend(_wrap_line(para, font_size, budget, profile, measure))

    return LayoutResult(
        lines=tuple(lines),
        line_height=font_size * profile.line_height_multiplier,
        font_size_px=font_size,
        direction=profile.direction,
    )
