"""
Verse Image Compositor - puts a verse on a background.

Pipeline, strictly ordered:
1. Resolve background (the only async / I/O step)
2. Allocate a surface the size of the background
3. Paint background + dark contrast overlay
4. Lay out the verse for the surface width
5. Paint lines centred horizontally and vertically
6. Paint the attribution line
7. Encode to JPEG

Steps 2-7 live in render() and are pure functions of the resolved
background, so previews can be re-run without touching the network.
"""

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from versecard.config import Settings, get_settings
from versecard.design_templates import get_script_profile
from versecard.errors import EmptyInputError, RenderContextError, SerializationError, VerseImageError
from versecard.models import LayoutResult, PixelSurface, RenderedImage, RenderRequest, RenderResult, ScriptProfile
from versecard.services.background import BackgroundResolver
from versecard.services.export import suggest_file_name
from versecard.services.text_layout import (
    MAX_SHRINK_STEPS,
    FontBook,
    layout,
    pillow_measure,
    shaping_kwargs,
    shrink_step,
    visual_text,
    wrap_budget,
)

logger = logging.getLogger(__name__)

# Colors
WHITE = (255, 255, 255, 255)
SHADOW = (0, 0, 0, 150)

ATTRIBUTION_Y = 0.85  # Relative to surface height
ATTRIBUTION_SCALE = 0.8  # Relative to verse font size
ATTRIBUTION_PREFIX = "— "


def vertical_start(surface_height: float, line_count: int, line_height: float) -> float:
    """Baseline of the first line so the block is centred (middle-anchored lines)."""
    return (surface_height - line_count * line_height) / 2 + line_height / 2


def line_positions(surface_height: float, result: LayoutResult) -> list[float]:
    start_y = vertical_start(surface_height, len(result.lines), result.line_height)
    return [start_y + i * result.line_height for i in range(len(result.lines))]


class VerseTextPainter:
    """Draws centred text with a soft drop shadow."""

    def __init__(self, fonts: FontBook):
        self.fonts = fonts

    def draw_text_with_shadow(
        self,
        draw: ImageDraw.ImageDraw,
        text: str,
        position: tuple,
        font: ImageFont.FreeTypeFont,
        profile: ScriptProfile,
        shadow_offset: int = 3,
    ):
        x, y = position
        text = visual_text(text, profile, font)
        kwargs = shaping_kwargs(profile, font)
        draw.text((x + shadow_offset, y + shadow_offset), text, font=font, fill=SHADOW, anchor="mm", **kwargs)
        draw.text(position, text, font=font, fill=WHITE, anchor="mm", **kwargs)

    def paint_verse(self, img: Image.Image, result: LayoutResult, profile: ScriptProfile):
        draw = ImageDraw.Draw(img, "RGBA")
        font = self.fonts.get_font(profile, result.font_size_px)
        center_x = img.width / 2
        for line, y in zip(result.lines, line_positions(img.height, result)):
            self.draw_text_with_shadow(draw, line, (center_x, y), font, profile)

    def attribution_font(
        self, text: str, font_size: float, surface_width: float, profile: ScriptProfile
    ) -> ImageFont.FreeTypeFont:
        """Italic face at 0.8x the verse size, shrunk until the line fits the wrap budget."""
        budget = wrap_budget(surface_width)
        font_size *= ATTRIBUTION_SCALE
        font = self.fonts.get_font(profile, font_size, italic=True)
        for _ in range(MAX_SHRINK_STEPS):
            width = font.getlength(visual_text(text, profile, font), **shaping_kwargs(profile, font))
            if width <= budget:
                break
            font_size = shrink_step(font_size, width, budget)
            font = self.fonts.get_font(profile, font_size, italic=True)
        return font

    def paint_attribution(self, img: Image.Image, attribution: str, font_size: float, profile: ScriptProfile):
        draw = ImageDraw.Draw(img, "RGBA")
        text = ATTRIBUTION_PREFIX + attribution
        font = self.attribution_font(text, font_size, img.width, profile)
        position = (img.width / 2, img.height * ATTRIBUTION_Y)
        self.draw_text_with_shadow(draw, text, position, font, profile, shadow_offset=2)


class VerseCompositor:
    """Main compositor for verse images."""

    def __init__(
        self,
        resolver: Optional[BackgroundResolver] = None,
        fonts: Optional[FontBook] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver or BackgroundResolver(settings=self.settings)
        self.fonts = fonts or FontBook(self.settings.fonts_dir)
        self.measure = pillow_measure(self.fonts)
        self.painter = VerseTextPainter(self.fonts)

    async def compose(self, request: RenderRequest, background: Optional[PixelSurface] = None) -> RenderResult:
        """
        Render a verse image.

        Args:
            request: Verse, background choice and attribution
            background: Already-resolved background to reuse (skips resolution)

        Returns:
            RenderResult holding either the image or the error that stopped it
        """
        try:
            # Fail before any network call
            if not request.verse.text or not request.verse.text.strip():
                raise EmptyInputError("Verse text is empty")
            if background is None:
                background = await self.resolver.resolve(request.background)
            image = self.render(background, request)
        except VerseImageError as e:
            logger.warning(f"Verse render failed: {type(e).__name__}: {e}")
            return RenderResult(error=e)
        return RenderResult(image=image)

    def render(self, background: PixelSurface, request: RenderRequest) -> RenderedImage:
        """Steps 2-7: paint and encode onto a surface sized to the background."""
        width, height = background.width, background.height
        if width <= 0 or height <= 0:
            raise RenderContextError(f"Cannot draw on a {width}x{height} surface")

        try:
            img = background.pixels.convert("RGBA")
            overlay = Image.new("RGBA", img.size, (0, 0, 0, self.settings.overlay_alpha))
        except (ValueError, MemoryError) as e:
            raise RenderContextError(f"Could not allocate {width}x{height} surface: {e}") from e
        img = Image.alpha_composite(img, overlay).convert("RGB")

        profile = get_script_profile(request.verse.language)
        result = layout(
            request.verse.text,
            width,
            profile.script,
            measure=self.measure,
            min_font_px=self.settings.min_font_px,
        )
        self.painter.paint_verse(img, result, profile)

        if request.attribution and request.attribution.strip():
            self.painter.paint_attribution(img, request.attribution.strip(), result.font_size_px, profile)

        surface = PixelSurface.from_image(img)
        encoded = self.encode(surface.pixels)
        logger.info(f"Rendered {width}x{height} verse image, {len(result.lines)} lines, {len(encoded)} bytes")

        return RenderedImage(
            surface=surface,
            encoded_bytes=encoded,
            suggested_file_name=suggest_file_name(request.title or ""),
        )

    def encode(self, img: Image.Image) -> bytes:
        buffer = BytesIO()
        try:
            img.save(buffer, format="JPEG", quality=self.settings.jpeg_quality)
        except (OSError, ValueError) as e:
            raise SerializationError(f"JPEG encoding failed: {e}") from e
        return buffer.getvalue()


async def compose(request: RenderRequest, background: Optional[PixelSurface] = None) -> RenderResult:
    """
    Convenience function to render a verse image.
    """
    compositor = VerseCompositor()
    return await compositor.compose(request, background=background)
