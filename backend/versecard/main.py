"""FastAPI app exposing the verse image API"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from versecard.config import get_settings
from versecard.design_templates import SCRIPT_PROFILES
from versecard.routes import router

logger = logging.getLogger(__name__)


def configure_logging():
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and report which script fonts are installed."""
    configure_logging()
    settings = get_settings()

    fonts_dir = Path(settings.fonts_dir)
    for profile in SCRIPT_PROFILES.values():
        if (fonts_dir / profile.font_dir / profile.regular_file).exists():
            logger.info(f"✓ {profile.font_family} font found")
        else:
            logger.warning(f"✗ {profile.font_family} font missing, using Pillow default (run setup_assets.py)")

    yield

    logger.info("Shutting down...")


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(router, prefix="/api")
