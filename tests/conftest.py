"""
Shared fixtures for django-portfolio-blog tests.
"""
import copy
from datetime import datetime, timedelta, timezone

import pytest

from portfolio_blog.workflow import AuthoringContext


class FakeClock:
    """Returns a fixed start time, then one minute later on every call."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        value = self.current
        self.current += timedelta(minutes=1)
        return value


class InMemoryRepository:
    """PostRepository keeping records in a dict, for tests without a database."""

    def __init__(self, records=()):
        self.records = {}
        self.upserts = []
        for record in records:
            self.records[record["id"]] = copy.deepcopy(record)

    def get_by_identifier(self, identifier):
        for record in self.records.values():
            if record.get("slug") == identifier:
                return copy.deepcopy(record)
        record = self.records.get(identifier)
        return copy.deepcopy(record) if record is not None else None

    def upsert(self, record):
        self.upserts.append(copy.deepcopy(record))
        self.records[record["id"]] = copy.deepcopy(record)
        return copy.deepcopy(record)

    def slug_exists(self, slug, exclude_id=None):
        return any(
            record.get("slug") == slug and record_id != exclude_id
            for record_id, record in self.records.items()
        )

    def list_records(self, include_drafts=False):
        records = [
            copy.deepcopy(record)
            for record in self.records.values()
            if include_drafts or not record.get("is_draft")
        ]
        return sorted(records, key=lambda r: r.get("published_at") or "", reverse=True)


class RecordingStorage:
    """StorageBackend that remembers uploads instead of storing them."""

    def __init__(self):
        self.uploads = []

    def upload(self, file_bytes, path):
        self.uploads.append((path, file_bytes))
        return f"https://cdn.example.com/{path}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admin_ctx(clock):
    return AuthoringContext(is_admin=True, clock=clock)


@pytest.fixture
def anonymous_ctx(clock):
    return AuthoringContext(is_admin=False, clock=clock)


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def post_record():
    """A well-formed published post record."""
    return {
        "id": "8d6c1b0e-6f0a-4a37-9a52-1e5f4c2d9b11",
        "slug": "building-a-portfolio",
        "title": "Building a Portfolio",
        "excerpt": "Notes on the rebuild.",
        "content": [
            {"type": "subtitle", "data": {"text": "Why rebuild"}},
            {"type": "body", "data": {"text": "The old site was slow."}},
            {"type": "list", "data": {"items": ["speed", "clarity"]}},
            {"type": "image", "data": {"url": "https://cdn.example.com/a.jpg", "altText": "Screenshot"}},
        ],
        "tags": ["design", "web"],
        "hero_image_large": "https://cdn.example.com/hero-large.jpg",
        "hero_image_thumbnail": "https://cdn.example.com/hero-thumb.jpg",
        "has_sources": True,
        "sources_data": [{"title": "Web Vitals", "url": "https://web.dev/vitals/"}],
        "has_notes": True,
        "notes_content": "Thanks to everyone who reviewed drafts.",
        "is_draft": False,
        "published_at": "2024-02-01T10:00:00+00:00",
        "created_at": "2024-01-30T08:00:00+00:00",
        "updated_at": "2024-02-01T10:00:00+00:00",
        "republished_at": None,
    }


@pytest.fixture
def repository(post_record):
    return InMemoryRepository([post_record])
