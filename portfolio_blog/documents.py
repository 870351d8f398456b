"""
Typed documents and the parse/serialize pair shared by every read and write.

parse_document() is the only place that decides what a valid document looks
like. It never raises for bad content: rejected blocks, sources and tags are
dropped, document-level inconsistencies are recorded as ValidationWarning
entries, and the caller gets a best-effort Document back.
"""
import json
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from django.utils.dateparse import parse_datetime

from .blocks import parse_blocks, serialize_block
from .exceptions import ValidationWarning

logger = logging.getLogger(__name__)

DRAFT = "draft"
PUBLISHED = "published"


@dataclass(frozen=True)
class Source:
    title: str
    url: str


@dataclass(frozen=True)
class HeroImage:
    """Uploaded hero image; the thumbnail is used on cards and listings."""

    large: str
    thumbnail: Optional[str] = None

    @property
    def thumbnail_or_large(self):
        return self.thumbnail or self.large


@dataclass(frozen=True)
class Document:
    """
    Blog post composed of ordered content blocks plus metadata.

    Documents are immutable; the authoring workflow returns new instances.
    """

    id: str
    slug: str
    title: str = ""
    excerpt: str = ""
    content: tuple = ()
    tags: tuple = ()
    hero_image: Optional[HeroImage] = None
    has_sources: bool = False
    sources: tuple = ()
    has_notes: bool = False
    notes: str = ""
    is_draft: bool = True
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    republished_at: Optional[datetime] = None
    warnings: tuple = field(default=(), compare=False)

    def __str__(self):
        return self.title or self.slug

    @property
    def state(self):
        return DRAFT if self.is_draft else PUBLISHED

    @property
    def has_been_published(self):
        """True once the first publish has stamped published_at."""
        return self.published_at is not None

    @property
    def degraded(self):
        """True when parsing dropped or flagged anything."""
        return bool(self.warnings)

    @property
    def visible_sources(self):
        """Sources to display; empty unless the sources section is enabled."""
        return self.sources if self.has_sources else ()

    @property
    def visible_notes(self):
        """Notes to display; empty unless the notes section is enabled."""
        return self.notes if self.has_notes and self.notes.strip() else ""


def _parse_timestamp(value, name, warnings):
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_datetime(value)
        except ValueError:
            # Well formed but not a real date, e.g. February 30th
            parsed = None
        if parsed is not None:
            return parsed
    warnings.append(ValidationWarning(field=name, message=f"invalid timestamp {value!r}"))
    return None


def _parse_text(value, name, warnings):
    if value is None:
        return ""
    if not isinstance(value, str):
        warnings.append(ValidationWarning(field=name, message=f"{name} must be text"))
        return ""
    return value


def _parse_is_draft(value, warnings):
    """Anything but an explicit False keeps the document a draft."""
    if isinstance(value, bool):
        return value
    warnings.append(
        ValidationWarning(field="is_draft", message=f"invalid draft flag {value!r}; treated as draft")
    )
    return True


def _format_timestamp(value):
    return value.isoformat() if value is not None else None


def _raw_content(value, warnings):
    """Return the stored content as a list of raw blocks."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            warnings.append(ValidationWarning(field="content", message="content is not valid JSON"))
            return []
    if isinstance(value, Sequence) and not isinstance(value, str):
        return value
    warnings.append(
        ValidationWarning(field="content", message="content is not a sequence of blocks")
    )
    return []


def _parse_tags(value, warnings):
    if not value:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        warnings.append(ValidationWarning(field="tags", message="tags must be a list"))
        return ()
    tags = []
    for index, tag in enumerate(value):
        if not isinstance(tag, str) or not tag.strip():
            warnings.append(ValidationWarning(field="tags", message="invalid tag", index=index))
        elif tag not in tags:
            tags.append(tag)
    return tuple(tags)


def _parse_sources(value, warnings):
    if not value:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        warnings.append(ValidationWarning(field="sources", message="sources must be a list"))
        return ()
    sources = []
    for index, raw in enumerate(value):
        title = raw.get("title") if isinstance(raw, Mapping) else None
        url = raw.get("url") if isinstance(raw, Mapping) else None
        if not isinstance(title, str) or not title.strip() or not isinstance(url, str) or not url.strip():
            warnings.append(
                ValidationWarning(field="sources", message="source needs a title and url", index=index)
            )
            continue
        sources.append(Source(title=title, url=url))
    return tuple(sources)


def _parse_hero_image(record):
    large = record.get("hero_image_large") or record.get("hero_image_url")
    if not large:
        return None
    return HeroImage(large=large, thumbnail=record.get("hero_image_thumbnail") or None)


def parse_document(record) -> Document:
    """
    Build a Document from a raw persistence record.

    Bad blocks are dropped, and broken has_sources / has_notes promises are
    flagged; the returned document is marked degraded in both cases.
    """
    warnings = []

    raw_blocks = _raw_content(record.get("content"), warnings)
    content, block_warnings = parse_blocks(raw_blocks)
    warnings.extend(block_warnings)

    has_sources = bool(record.get("has_sources"))
    sources = _parse_sources(record.get("sources_data"), warnings)
    if has_sources and not sources:
        warnings.append(
            ValidationWarning(field="sources", message="sources are enabled but none are set")
        )

    has_notes = bool(record.get("has_notes"))
    notes = record.get("notes_content") or ""
    if not isinstance(notes, str):
        warnings.append(ValidationWarning(field="notes", message="notes must be text"))
        notes = ""
    if has_notes and not notes.strip():
        warnings.append(ValidationWarning(field="notes", message="notes are enabled but empty"))

    slug = _parse_text(record.get("slug"), "slug", warnings)
    if not slug:
        warnings.append(ValidationWarning(field="slug", message="document has no slug"))

    document = Document(
        id=str(record.get("id") or ""),
        slug=slug,
        title=_parse_text(record.get("title"), "title", warnings),
        excerpt=_parse_text(record.get("excerpt"), "excerpt", warnings),
        content=content,
        tags=_parse_tags(record.get("tags"), warnings),
        hero_image=_parse_hero_image(record),
        has_sources=has_sources,
        sources=sources,
        has_notes=has_notes,
        notes=notes,
        is_draft=_parse_is_draft(record.get("is_draft", True), warnings),
        published_at=_parse_timestamp(record.get("published_at"), "published_at", warnings),
        created_at=_parse_timestamp(record.get("created_at"), "created_at", warnings),
        updated_at=_parse_timestamp(record.get("updated_at"), "updated_at", warnings),
        republished_at=_parse_timestamp(record.get("republished_at"), "republished_at", warnings),
        warnings=tuple(warnings),
    )

    for warning in warnings:
        if warning.field != "content":
            logger.warning("Document %r: %s", document.slug or document.id, warning)

    return document


def serialize_document(document: Document) -> dict:
    """Return the raw persistence record for a document."""
    hero = document.hero_image
    return {
        "id": document.id,
        "slug": document.slug,
        "title": document.title,
        "excerpt": document.excerpt,
        "content": [serialize_block(block) for block in document.content],
        "tags": list(document.tags),
        "hero_image_large": hero.large if hero else None,
        "hero_image_thumbnail": hero.thumbnail if hero else None,
        "has_sources": document.has_sources,
        "sources_data": [{"title": s.title, "url": s.url} for s in document.sources],
        "has_notes": document.has_notes,
        "notes_content": document.notes,
        "is_draft": document.is_draft,
        "published_at": _format_timestamp(document.published_at),
        "created_at": _format_timestamp(document.created_at),
        "updated_at": _format_timestamp(document.updated_at),
        "republished_at": _format_timestamp(document.republished_at),
    }
