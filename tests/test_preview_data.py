import pytest

from config import Settings
from preview_data import (
    build_description,
    car_metadata,
    default_metadata,
    format_price,
    part_metadata,
    pick_main_image,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (85000, "85,000"),
        (1234567, "1,234,567"),
        (999, "999"),
        (85000.0, "85,000"),
        (1250.5, "1,250.5"),
        ("42000", "42,000"),
        (None, None),
        ("call me", None),
        (True, None),
    ],
)
def test_format_price(value, expected):
    assert format_price(value) == expected


def test_pick_main_image_prefers_flagged_image_regardless_of_order():
    images = [
        {"image_url": "https://x/1.jpg", "is_main": False},
        {"image_url": "https://x/2.jpg", "is_main": True},
    ]
    assert pick_main_image(images, "image_url", "is_main") == "https://x/2.jpg"
    assert pick_main_image(list(reversed(images)), "image_url", "is_main") == "https://x/2.jpg"


def test_pick_main_image_falls_back_to_first():
    images = [{"url": "https://x/a.jpg"}, {"url": "https://x/b.jpg", "is_primary": False}]
    assert pick_main_image(images, "url", "is_primary") == "https://x/a.jpg"


@pytest.mark.parametrize("images", [None, [], [{"image_url": ""}], "nope"])
def test_pick_main_image_none(images):
    assert pick_main_image(images, "image_url", "is_main") is None


def test_build_description_truncates_to_100_chars():
    settings = Settings()
    text = "x" * 250
    desc = build_description(5000, "SAR", text, settings)
    assert desc == "Price: 5,000 SAR. " + "x" * 100


def test_build_description_without_price_or_text():
    settings = Settings()
    assert build_description(None, "QAR", None, settings) == "View details."
    assert build_description(100, "", "", settings) == "Price: 100 QAR. View details."


def test_car_metadata():
    settings = Settings()
    row = {
        "year": 2023,
        "price": 85000,
        "description": "Full option.",
        "brands": {"name": "Toyota"},
        "models": {"name": "Camry"},
        "car_images": [
            {"image_url": "https://abc.supabase.co/storage/a.jpg", "is_main": False},
            {"image_url": "https://abc.supabase.co/storage/b.jpg", "is_main": True},
        ],
        "countries": {"currency_code": "QAR"},
    }
    meta = car_metadata(row, settings, "/qa/cars/42")
    assert meta.title == "Toyota Camry 2023 | Mawater974"
    assert meta.description == "Price: 85,000 QAR. Full option."
    assert meta.image_url == "https://abc.supabase.co/storage/b.jpg"
    assert meta.canonical_path == "/qa/cars/42"


def test_car_metadata_missing_relations_uses_defaults():
    settings = Settings()
    meta = car_metadata({"price": 1000}, settings, "/qa/cars/1")
    assert meta.title == settings.default_title
    assert meta.description == "Price: 1,000 QAR. View details."
    assert meta.image_url == settings.default_image_url


def test_part_metadata():
    settings = Settings()
    row = {
        "title": "Brake pads",
        "price": 350,
        "currency": "AED",
        "description": None,
        "spare_part_images": [
            {"url": "https://x/1.jpg", "is_primary": False},
            {"url": "https://x/2.jpg", "is_primary": True},
        ],
    }
    meta = part_metadata(row, settings, "/ae/spare-parts/7")
    assert meta.title == "Brake pads | Mawater974"
    assert meta.description == "Price: 350 AED. View details."
    assert meta.image_url == "https://x/2.jpg"


def test_default_metadata_populates_every_field():
    settings = Settings()
    meta = default_metadata(settings, "/qa/cars/1")
    assert meta.title == "Mawater974 - Premium Marketplace"
    assert meta.description == "Buy and sell cars and spare parts."
    assert meta.image_url == "https://mawater974.com/og-image.png"
    assert meta.canonical_path == "/qa/cars/1"
