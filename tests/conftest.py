"""Shared fixtures for the preview server tests."""

from typing import List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app
from preview_data import PreviewMetadata

FACEBOOK_UA = "facebookexternalhit/1.1 (+http://www.facebook.com/externalhit_uatext.php)"
BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0 Safari/537.36"
)


class RecordingSource:
    """Metadata source that returns a fixed value (or raises) and records calls."""

    def __init__(
        self,
        metadata: Optional[PreviewMetadata] = None,
        error: Optional[Exception] = None,
    ):
        self.metadata = metadata
        self.error = error
        self.calls: List[Tuple[str, str, str]] = []

    async def fetch(self, entity_type, entity_id, canonical_path):
        self.calls.append((entity_type, entity_id, canonical_path))
        if self.error is not None:
            raise self.error
        return self.metadata.model_copy(update={"canonical_path": canonical_path})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://abc.supabase.co",
        supabase_anon_key="anon-key",
    )


@pytest.fixture
def camry() -> PreviewMetadata:
    return PreviewMetadata(
        title="Toyota Camry 2023 | Mawater974",
        description="Price: 85,000 QAR. Clean car, single owner.",
        image_url="https://cdn.example.com/camry.jpg",
        canonical_path="/",
    )


@pytest.fixture
def source(camry) -> RecordingSource:
    return RecordingSource(metadata=camry)


@pytest.fixture
def client(settings, source) -> TestClient:
    return TestClient(create_app(settings=settings, source=source))
