#!/usr/bin/env python3
"""
Start the Verse Card image server.
"""

import uvicorn
from versecard.config import get_settings

settings = get_settings()

if __name__ == "__main__":
    print("=" * 50)
    print("Verse Card Image Generator")
    print("=" * 50)
    print(f"Starting server at http://{settings.host}:{settings.port}")
    print(f"API Docs: http://localhost:{settings.port}/docs")
    print("=" * 50)

    uvicorn.run(
        "versecard.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )
