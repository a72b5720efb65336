"""
Mawater974 Preview Server — FastAPI app that answers social-media crawlers
with Open Graph previews of car and spare-part listings.

Start: cd server && python main.py
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from config import Settings
from share_preview import SocialPreviewMiddleware, router as preview_router
from supabase_source import MetadataSource, SupabaseMetadataSource

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Load server/.env (Supabase keys live here)
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=str(env_path), override=True)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    source: Optional[MetadataSource] = None,
) -> FastAPI:
    """Build the app. Tests pass their own settings and metadata source."""
    settings = settings or Settings.from_env()
    if not settings.is_backend_configured:
        logger.error(
            "SUPABASE_URL / SUPABASE_ANON_KEY not set; previews will use default metadata."
        )
    source = source or SupabaseMetadataSource(settings)

    app = FastAPI(title="Mawater974 Preview Server")
    app.state.settings = settings
    app.state.preview_source = source

    app.add_middleware(SocialPreviewMiddleware, source=source, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(preview_router)

    @app.get("/api/health")
    async def health(request: Request):
        """Health check endpoint."""
        return {
            "status": "ok",
            "backend_configured": request.app.state.settings.is_backend_configured,
        }

    return app


app = create_app()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    logger.info(f"Starting Mawater974 Preview Server on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)
