"""
Share previews — serves Open Graph meta tags to social-media crawlers and
lets every other request through to the SPA.

Two ways in, one code path:
  • SocialPreviewMiddleware: this server fronts the SPA; crawler GETs to
    /{cc}/cars/{id} and /{cc}/spare-parts/{id} are answered here.
  • GET /api/og?id=…&type=car|part&path=…: an edge function that already did
    the crawler check forwards the request here.
"""

import logging
import re
from typing import NamedTuple, Optional, Union

from fastapi import APIRouter, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from config import Settings
from preview_data import EntityType, PreviewMetadata, default_metadata
from preview_template import render_preview_html
from supabase_source import MetadataSource

logger = logging.getLogger(__name__)
router = APIRouter()

# ---------------------------------------------------------------------------
# Crawler detection
# ---------------------------------------------------------------------------

CRAWLER_SIGNATURES = (
    "facebookexternalhit",
    "facebookcatalog",
    "facebook",
    "whatsapp",
    "twitterbot",
    "linkedinbot",
    "telegrambot",
    "discordbot",
    "slackbot",
)


def is_crawler(user_agent: Optional[str]) -> bool:
    ua = (user_agent or "").lower()
    return any(sig in ua for sig in CRAWLER_SIGNATURES)


# ---------------------------------------------------------------------------
# Route resolution
# ---------------------------------------------------------------------------

_SEGMENT_TO_ENTITY = {"cars": "car", "spare-parts": "part"}
_WATCHED_ROUTE = re.compile(r"^/([a-z]{2})/(cars|spare-parts)(?:/(.*))?$", re.IGNORECASE)


class PreviewRoute(NamedTuple):
    entity_type: EntityType
    entity_id: str
    country_code: str


class UnresolvableRoute(NamedTuple):
    """A watched path that does not name exactly one listing."""

    path: str


def resolve_route(path: str) -> Union[PreviewRoute, UnresolvableRoute, None]:
    """
    Map a request path to the listing it shows.

    Returns None for paths outside /{cc}/cars and /{cc}/spare-parts.
    """
    match = _WATCHED_ROUTE.match(path or "")
    if not match:
        return None

    country_code, segment, rest = match.groups()
    if rest is not None and rest.endswith("/"):
        rest = rest[:-1]
    if not rest or "/" in rest:
        return UnresolvableRoute(path)

    return PreviewRoute(
        entity_type=_SEGMENT_TO_ENTITY[segment.lower()],
        entity_id=rest,
        country_code=country_code.lower(),
    )


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


async def _fetch_metadata(
    source: MetadataSource,
    settings: Settings,
    entity_type: EntityType,
    entity_id: str,
    path: str,
) -> PreviewMetadata:
    try:
        return await source.fetch(entity_type, entity_id, path)
    except Exception:
        logger.exception("Metadata source failed for %s %s", entity_type, entity_id)
        return default_metadata(settings, path)


def build_preview_response(metadata: PreviewMetadata, settings: Settings) -> Response:
    headers = {}
    if settings.preview_cache_max_age > 0:
        headers["Cache-Control"] = f"public, s-maxage={settings.preview_cache_max_age}"
    return Response(
        content=render_preview_html(metadata, settings),
        status_code=200,
        media_type="text/html; charset=utf-8",
        headers=headers,
    )


async def render_preview(
    request: Request, source: MetadataSource, settings: Settings
) -> Optional[Response]:
    """
    Answer a crawler's request for a listing page with a preview document.

    Returns None when the request should continue to the normal application.
    """
    if request.method not in ("GET", "HEAD"):
        return None
    user_agent = request.headers.get("user-agent", "")
    if not is_crawler(user_agent):
        return None

    path = request.url.path
    route = resolve_route(path)
    if route is None:
        return None
    if isinstance(route, UnresolvableRoute):
        logger.warning("Crawler hit unresolvable listing route %s; passing through", path)
        return None

    logger.info(
        "Serving %s preview id=%s to crawler (%s)",
        route.entity_type, route.entity_id, user_agent[:80],
    )
    metadata = await _fetch_metadata(
        source, settings, route.entity_type, route.entity_id, path
    )
    return build_preview_response(metadata, settings)


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------


class SocialPreviewMiddleware(BaseHTTPMiddleware):
    """Short-circuits crawler requests for listing pages with a preview document."""

    def __init__(self, app, source: MetadataSource, settings: Settings):
        super().__init__(app)
        self.source = source
        self.settings = settings

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await render_preview(request, self.source, self.settings)
        if response is None:
            return await call_next(request)
        return response


@router.get("/api/og")
async def og_preview(
    request: Request,
    id: str = "",
    type: Optional[str] = None,
    path: str = "/",
):
    """Render the preview document for a listing forwarded by an edge function."""
    settings: Settings = request.app.state.settings
    source: MetadataSource = request.app.state.preview_source
    path = path or "/"

    if type not in _SEGMENT_TO_ENTITY.values():
        logger.warning("Unresolvable preview type=%r for %s; serving defaults", type, path)
        return build_preview_response(default_metadata(settings, path), settings)

    metadata = await _fetch_metadata(source, settings, type, id.strip(), path)
    return build_preview_response(metadata, settings)
