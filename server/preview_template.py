"""
HTML document served to link-preview crawlers.

Every interpolated value is escaped; listing titles and descriptions are user
content.
"""

import json
from html import escape
from urllib.parse import quote, urlsplit

from config import Settings
from preview_data import PreviewMetadata

FB_APP_ID = "966242223397117"
OG_IMAGE_WIDTH = 600
OG_IMAGE_HEIGHT = 315

# Characters left alone when percent-encoding the request path.
_PATH_SAFE_CHARS = "/:@!$&'()*+,;=-._~"


def optimize_image_url(image_url: str, settings: Settings) -> str:
    """Ask the storage backend for a social-card sized rendition."""
    if not settings.resize_storage_images or not image_url:
        return image_url
    host = (urlsplit(image_url).hostname or "").lower()
    domain = settings.storage_domain.lower()
    if not (host == domain or host.endswith("." + domain)):
        return image_url
    sep = "&" if "?" in image_url else "?"
    return (
        f"{image_url}{sep}width={OG_IMAGE_WIDTH}"
        f"&height={OG_IMAGE_HEIGHT}&resize=contain"
    )


def _script_string(value: str) -> str:
    # JSON string literal that cannot close the surrounding <script> element.
    return json.dumps(value).replace("<", "\\u003c").replace(">", "\\u003e")


def render_preview_html(metadata: PreviewMetadata, settings: Settings) -> str:
    path = quote(metadata.canonical_path or "/", safe=_PATH_SAFE_CHARS)
    page_url = f"{settings.site_base_url.rstrip('/')}{path}"
    image_url = optimize_image_url(metadata.image_url, settings)

    safe_title = escape(metadata.title)
    safe_desc = escape(metadata.description)
    safe_image = escape(image_url)
    safe_url = escape(page_url)
    safe_path = escape(path)

    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "<head>\n"
        '  <meta charset="UTF-8">\n'
        f"  <title>{safe_title}</title>\n"
        f'  <meta name="description" content="{safe_desc}">\n'
        f'  <meta property="fb:app_id" content="{FB_APP_ID}">\n'
        '  <meta property="og:type" content="article">\n'
        f'  <meta property="og:title" content="{safe_title}">\n'
        f'  <meta property="og:description" content="{safe_desc}">\n'
        f'  <meta property="og:image" content="{safe_image}">\n'
        f'  <meta property="og:image:width" content="{OG_IMAGE_WIDTH}">\n'
        f'  <meta property="og:image:height" content="{OG_IMAGE_HEIGHT}">\n'
        f'  <meta property="og:url" content="{safe_url}">\n'
        '  <meta name="twitter:card" content="summary_large_image">\n'
        f'  <meta name="twitter:title" content="{safe_title}">\n'
        f'  <meta name="twitter:description" content="{safe_desc}">\n'
        f'  <meta name="twitter:image" content="{safe_image}">\n'
        f'  <meta http-equiv="refresh" content="0;url={safe_path}">\n'
        "</head>\n"
        "<body>\n"
        f"  <h1>{safe_title}</h1>\n"
        f'  <img src="{safe_image}" alt="{safe_title}">\n'
        f"  <p>{safe_desc}</p>\n"
        f"  <script>window.location.replace({_script_string(path)});</script>\n"
        "</body>\n</html>"
    )
