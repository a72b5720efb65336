"""
Runtime settings for the Mawater974 preview server.

Built once at startup from the process environment (server/.env is loaded by
main.py first) and handed to the data source and the router.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_SITE_BASE_URL = "https://mawater974.com"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None

    site_base_url: str = DEFAULT_SITE_BASE_URL
    site_name: str = "Mawater974"

    default_title: str = "Mawater974 - Premium Marketplace"
    default_description: str = "Buy and sell cars and spare parts."
    default_image_url: str = f"{DEFAULT_SITE_BASE_URL}/og-image.png"
    default_currency: str = "QAR"

    preview_cache_max_age: int = 3600  # seconds, 0 = no Cache-Control
    resize_storage_images: bool = True
    storage_domain: str = "supabase.co"
    request_timeout: float = 5.0

    @property
    def is_backend_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from environment variables, keeping defaults for unset ones."""
        site_base_url = (os.getenv("SITE_BASE_URL") or DEFAULT_SITE_BASE_URL).rstrip("/")
        supabase_url = (os.getenv("SUPABASE_URL") or "").rstrip("/") or None

        return cls(
            supabase_url=supabase_url,
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
            site_base_url=site_base_url,
            site_name=os.getenv("SITE_NAME", "Mawater974"),
            default_image_url=os.getenv(
                "DEFAULT_OG_IMAGE_URL", f"{site_base_url}/og-image.png"
            ),
            default_currency=os.getenv("DEFAULT_CURRENCY", "QAR"),
            preview_cache_max_age=int(os.getenv("PREVIEW_CACHE_MAX_AGE", "3600")),
            resize_storage_images=_env_bool("RESIZE_STORAGE_IMAGES", True),
            storage_domain=os.getenv("STORAGE_DOMAIN", "supabase.co"),
            request_timeout=float(os.getenv("SUPABASE_TIMEOUT", "5")),
        )
