"""
Metadata fetcher backed by Supabase's PostgREST interface.

One GET per preview, no retry. Whatever goes wrong (network, HTTP status,
bad JSON, missing row) is logged and turned into default metadata so the
router always has something to render.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from config import Settings
from preview_data import (
    METADATA_BUILDERS,
    EntityType,
    PreviewMetadata,
    default_metadata,
)

logger = logging.getLogger(__name__)

# table, select projection
ENTITY_QUERIES: Dict[str, tuple] = {
    "car": (
        "cars",
        "year,price,description,brands(name),models(name),"
        "car_images(image_url,is_main),countries(currency_code)",
    ),
    "part": (
        "spare_parts",
        "title,price,currency,description,spare_part_images(url,is_primary)",
    ),
}


class MetadataSource(Protocol):
    async def fetch(
        self, entity_type: EntityType, entity_id: str, canonical_path: str
    ) -> PreviewMetadata:
        ...


class SupabaseMetadataSource:
    """Reads listing rows from PostgREST and converts them to PreviewMetadata."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        # Tests pass an httpx.MockTransport; production uses the default one.
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        key = self.settings.supabase_anon_key or ""
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Accept": "application/json",
        }

    async def _query_row(
        self, entity_type: EntityType, entity_id: str
    ) -> Optional[Dict[str, Any]]:
        table, projection = ENTITY_QUERIES[entity_type]
        url = f"{self.settings.supabase_url}/rest/v1/{table}"
        params = {"id": f"eq.{entity_id}", "select": projection}

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.settings.request_timeout,
            headers=self._headers(),
        ) as client:
            resp = await client.get(url, params=params)
        resp.raise_for_status()

        rows = resp.json()
        if not isinstance(rows, list):
            raise ValueError(f"expected a JSON array, got {type(rows).__name__}")
        if not rows or not isinstance(rows[0], dict):
            return None
        return rows[0]

    async def fetch(
        self, entity_type: EntityType, entity_id: str, canonical_path: str
    ) -> PreviewMetadata:
        defaults = default_metadata(self.settings, canonical_path)

        if not self.settings.is_backend_configured:
            logger.warning("Supabase not configured; serving default preview for %s", canonical_path)
            return defaults
        if not entity_id:
            logger.info("No %s id in %s; serving default preview", entity_type, canonical_path)
            return defaults

        try:
            row = await self._query_row(entity_type, entity_id)
        except httpx.HTTPStatusError as e:
            logger.error(
                "Supabase returned HTTP %s for %s %s",
                e.response.status_code, entity_type, entity_id,
            )
            return defaults
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Supabase request failed for %s %s: %s", entity_type, entity_id, e)
            return defaults
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            logger.error("Malformed Supabase response for %s %s: %s", entity_type, entity_id, e)
            return defaults

        if row is None:
            logger.info("No %s found with id=%s", entity_type, entity_id)
            return defaults

        try:
            return METADATA_BUILDERS[entity_type](row, self.settings, canonical_path)
        except (TypeError, ValueError) as e:
            logger.error("Could not build preview for %s %s: %s", entity_type, entity_id, e)
            return defaults
