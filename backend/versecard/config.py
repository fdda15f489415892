from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # Fonts - one subdirectory per family, see setup_assets.py
    fonts_dir: str = "assets/fonts"

    # Output image
    canvas_size: int = 1080  # Procedural backgrounds are square
    jpeg_quality: int = 90
    overlay_alpha: int = 128  # 0-255, black contrast layer over the background

    # Typography
    min_font_px: int = 24

    # Background resolution
    fetch_timeout_seconds: Optional[float] = None  # None = no timeout, caller decides
    max_background_mb: int = 20
    default_theme: str = "starry"

    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False  # Auto-reload on code changes, for local development

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def max_background_bytes(self) -> int:
        return self.max_background_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()
