"""
Preview sessions - "last request wins" for rapid re-renders.

A user flicking through verses can start several renders before the first
finishes. Each render gets a generation token; when it completes, its
result is only applied if no newer render has started since. In-flight
decodes are not cancelled, their results are just dropped.
"""

import logging
from typing import Optional

from versecard.errors import NoRenderAvailableError, VerseImageError
from versecard.models import BackgroundSpec, PixelSurface, RenderedImage, RenderRequest, RenderResult
from versecard.services.compositor import VerseCompositor
from versecard.services.export import to_download

logger = logging.getLogger(__name__)


class PreviewSession:
    """Per-user preview state: current generation, last good image, cached background."""

    def __init__(self, compositor: Optional[VerseCompositor] = None):
        self.compositor = compositor or VerseCompositor()
        self.generation = 0
        self.last_image: Optional[RenderedImage] = None
        self._background: Optional[tuple[BackgroundSpec, PixelSurface]] = None

    def _cached_background(self, spec: BackgroundSpec) -> Optional[PixelSurface]:
        if self._background is not None and self._background[0] == spec:
            return self._background[1]
        return None

    async def render(self, request: RenderRequest) -> Optional[RenderResult]:
        """
        Render a preview.

        Returns None when a newer render started while this one was in
        flight; the caller should ignore it.
        """
        self.generation += 1
        token = self.generation

        result = None
        background = self._cached_background(request.background)

        # Resolve here rather than inside compose so later previews can reuse it.
        # Empty verses skip this and fail fast in compose.
        if background is None and request.verse.text.strip():
            try:
                background = await self.compositor.resolver.resolve(request.background)
            except VerseImageError as e:
                result = RenderResult(error=e)
            else:
                if token == self.generation:
                    self._background = (request.background, background)

        if result is None:
            result = await self.compositor.compose(request, background=background)

        if token != self.generation:
            logger.debug(f"Dropping stale preview {token}, current is {self.generation}")
            return None
        if result.ok:
            self.last_image = result.image
        else:
            logger.info(f"Preview {token} failed, keeping previous image")
        return result

    def download(self, base_name: str) -> tuple[str, bytes]:
        """Filename and bytes of the last successful preview."""
        if self.last_image is None:
            raise NoRenderAvailableError("No successful render to download")
        return to_download(self.last_image, base_name)
