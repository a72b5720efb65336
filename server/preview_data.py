"""
PreviewMetadata and the rules that turn a backend row into one.

Everything here is pure: no I/O, no logging. The fetcher in
supabase_source.py calls these after it has a decoded row.
"""

import math
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from config import Settings

EntityType = Literal["car", "part"]

DESCRIPTION_EXCERPT_LENGTH = 100
FALLBACK_DESCRIPTION_TEXT = "View details."


class PreviewMetadata(BaseModel):
    """Values rendered into the crawler-facing preview document."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    image_url: str
    canonical_path: str


def default_metadata(settings: Settings, canonical_path: str) -> PreviewMetadata:
    return PreviewMetadata(
        title=settings.default_title,
        description=settings.default_description,
        image_url=settings.default_image_url,
        canonical_path=canonical_path,
    )


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def format_price(value: Any) -> Optional[str]:
    """
    Group digits with commas and drop trailing zeros: ``85000`` -> ``85,000``,
    ``1250.5`` -> ``1,250.5``. Returns None for anything that is not a number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def pick_main_image(
    images: Any, url_key: str, flag_key: str
) -> Optional[str]:
    """Return the flagged image URL, else the first image, else None."""
    if not isinstance(images, list):
        return None
    candidates: List[Dict[str, Any]] = [
        img for img in images if isinstance(img, dict) and _text(img.get(url_key))
    ]
    if not candidates:
        return None
    for img in candidates:
        if img.get(flag_key) is True:
            return _text(img[url_key])
    return _text(candidates[0][url_key])


def build_description(
    price: Any, currency: str, text: Any, settings: Settings
) -> str:
    excerpt = _text(text)[:DESCRIPTION_EXCERPT_LENGTH] or FALLBACK_DESCRIPTION_TEXT
    formatted = format_price(price)
    if formatted is None:
        return excerpt
    currency = currency or settings.default_currency
    return f"Price: {formatted} {currency}. {excerpt}"


def _related_name(row: Dict[str, Any], key: str) -> str:
    related = row.get(key)
    if isinstance(related, dict):
        return _text(related.get("name"))
    return ""


# ---------------------------------------------------------------------------
# Entity builders
# ---------------------------------------------------------------------------


def car_metadata(
    row: Dict[str, Any], settings: Settings, canonical_path: str
) -> PreviewMetadata:
    year = row.get("year")
    heading = " ".join(
        part
        for part in (
            _related_name(row, "brands"),
            _related_name(row, "models"),
            str(year) if year else "",
        )
        if part
    )
    title = f"{heading} | {settings.site_name}" if heading else settings.default_title

    country = row.get("countries")
    currency = _text(country.get("currency_code")) if isinstance(country, dict) else ""

    return PreviewMetadata(
        title=title,
        description=build_description(
            row.get("price"), currency, row.get("description"), settings
        ),
        image_url=pick_main_image(row.get("car_images"), "image_url", "is_main")
        or settings.default_image_url,
        canonical_path=canonical_path,
    )


def part_metadata(
    row: Dict[str, Any], settings: Settings, canonical_path: str
) -> PreviewMetadata:
    name = _text(row.get("title"))
    title = f"{name} | {settings.site_name}" if name else settings.default_title

    return PreviewMetadata(
        title=title,
        description=build_description(
            row.get("price"), _text(row.get("currency")), row.get("description"), settings
        ),
        image_url=pick_main_image(row.get("spare_part_images"), "url", "is_primary")
        or settings.default_image_url,
        canonical_path=canonical_path,
    )


METADATA_BUILDERS = {
    "car": car_metadata,
    "part": part_metadata,
}
