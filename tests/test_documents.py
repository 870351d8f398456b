"""
Tests for parsing and serializing documents.
"""
import json
from datetime import datetime, timezone

from portfolio_blog.blocks import BodyBlock, ImageBlock, ListBlock, SubtitleBlock
from portfolio_blog.documents import (
    Document,
    HeroImage,
    Source,
    parse_document,
    serialize_document,
)


class TestParseDocument:
    """Tests for parse_document."""

    def test_well_formed_record(self, post_record):
        """Test parsing a well-formed record."""
        document = parse_document(post_record)

        assert document.id == post_record["id"]
        assert document.slug == "building-a-portfolio"
        assert document.content == (
            SubtitleBlock("Why rebuild"),
            BodyBlock("The old site was slow."),
            ListBlock(("speed", "clarity")),
            ImageBlock("https://cdn.example.com/a.jpg", "Screenshot"),
        )
        assert document.tags == ("design", "web")
        assert document.hero_image == HeroImage(
            large="https://cdn.example.com/hero-large.jpg",
            thumbnail="https://cdn.example.com/hero-thumb.jpg",
        )
        assert document.sources == (Source("Web Vitals", "https://web.dev/vitals/"),)
        assert document.published_at == datetime(2024, 2, 1, 10, 0, tzinfo=timezone.utc)
        assert document.state == "published"
        assert not document.degraded

    def test_unknown_block_is_dropped_with_warning(self, post_record):
        """Test dropping an unknown block with a warning."""
        post_record["content"] = [
            {"type": "body", "data": {"text": "one"}},
            {"type": "video", "data": {"url": "https://youtube.com/x"}},
            {"type": "body", "data": {"text": "two"}},
        ]

        document = parse_document(post_record)

        assert document.content == (BodyBlock("one"), BodyBlock("two"))
        assert len(document.warnings) == 1
        assert document.warnings[0].index == 1
        assert document.degraded

    def test_content_may_be_empty(self, post_record):
        """Test that content may be empty."""
        post_record["content"] = []
        document = parse_document(post_record)
        assert document.content == ()
        assert not document.degraded

    def test_content_stored_as_json_string(self, post_record):
        """Test content stored as a JSON string."""
        post_record["content"] = json.dumps([{"type": "body", "data": {"text": "x"}}])
        assert parse_document(post_record).content == (BodyBlock("x"),)

    def test_rich_text_document_is_not_block_content(self, post_record):
        """Test content that is a rich-text document."""
        post_record["content"] = {"type": "doc", "content": []}
        document = parse_document(post_record)
        assert document.content == ()
        assert document.degraded

    def test_sources_enabled_but_missing(self, post_record):
        """Test sources enabled with none stored."""
        post_record["sources_data"] = []
        document = parse_document(post_record)

        assert document.has_sources
        assert document.degraded
        assert [w.field for w in document.warnings] == ["sources"]
        assert document.visible_sources == ()

    def test_incomplete_sources_are_dropped(self, post_record):
        """Test dropping incomplete sources."""
        post_record["sources_data"] = [
            {"title": "", "url": "https://a.example"},
            {"title": "B", "url": "https://b.example"},
            "not a source",
        ]
        document = parse_document(post_record)

        assert document.sources == (Source("B", "https://b.example"),)
        assert [w.index for w in document.warnings] == [0, 2]

    def test_sources_kept_but_hidden_when_disabled(self, post_record):
        """Test sources kept but hidden when disabled."""
        post_record["has_sources"] = False
        document = parse_document(post_record)

        assert document.sources
        assert document.visible_sources == ()
        assert not document.degraded

    def test_notes_enabled_but_empty(self, post_record):
        """Test notes enabled but empty."""
        post_record["notes_content"] = "  "
        document = parse_document(post_record)

        assert document.degraded
        assert document.visible_notes == ""

    def test_tags_are_deduplicated(self, post_record):
        """Test tag de-duplication."""
        post_record["tags"] = ["web", "design", "web", 5]
        document = parse_document(post_record)
        assert document.tags == ("web", "design")

    def test_legacy_hero_image_url(self, post_record):
        """Test the legacy hero image key."""
        del post_record["hero_image_large"]
        post_record["hero_image_thumbnail"] = None
        post_record["hero_image_url"] = "https://cdn.example.com/old.jpg"

        hero = parse_document(post_record).hero_image
        assert hero == HeroImage(large="https://cdn.example.com/old.jpg")
        assert hero.thumbnail_or_large == "https://cdn.example.com/old.jpg"

    def test_invalid_timestamp(self, post_record):
        """Test an unparseable timestamp."""
        post_record["updated_at"] = "yesterday"
        document = parse_document(post_record)
        assert document.updated_at is None
        assert document.degraded

    def test_missing_flags_default_to_draft(self):
        """Test defaults for a bare record."""
        document = parse_document({"id": "1", "slug": "bare"})
        assert document.is_draft
        assert document.content == ()
        assert document.hero_image is None

    def test_impossible_date_degrades(self, post_record):
        """A well-formed but impossible date is dropped with a warning."""
        post_record["published_at"] = "2024-02-30T10:00:00+00:00"
        document = parse_document(post_record)
        assert document.published_at is None
        assert [w.field for w in document.warnings] == ["published_at"]

    def test_null_draft_flag_stays_draft(self, post_record):
        """A null draft flag never makes a document public."""
        post_record["is_draft"] = None
        document = parse_document(post_record)
        assert document.is_draft
        assert document.state == "draft"
        assert [w.field for w in document.warnings] == ["is_draft"]

    def test_non_text_title_and_slug(self, post_record):
        """Non-string title and slug fall back to empty text."""
        post_record["title"] = 42
        post_record["slug"] = ["building"]
        document = parse_document(post_record)
        assert document.title == ""
        assert document.slug == ""
        assert str(document) == ""
        assert {"title", "slug"} <= {w.field for w in document.warnings}


class TestSerializeDocument:
    """Tests for serialize_document."""

    def test_round_trip(self, post_record):
        """Test the parse/serialize round trip."""
        document = parse_document(post_record)
        assert parse_document(serialize_document(document)) == document

    def test_round_trip_through_json(self, post_record):
        """Test the round trip through JSON text."""
        document = parse_document(post_record)
        encoded = json.dumps(serialize_document(document))
        assert parse_document(json.loads(encoded)) == document

    def test_round_trip_of_constructed_document(self):
        """Test the round trip of a constructed document."""
        created = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        document = Document(
            id="abc",
            slug="hello",
            title="Hello",
            content=(SubtitleBlock("A"), ListBlock(()), ImageBlock("/x.png")),
            tags=("one",),
            created_at=created,
            updated_at=created,
        )
        assert parse_document(serialize_document(document)) == document

    def test_shape(self, post_record):
        """Test the serialized record shape."""
        record = serialize_document(parse_document(post_record))
        assert record["content"][2] == {"type": "list", "data": {"items": ["speed", "clarity"]}}
        assert record["sources_data"] == [{"title": "Web Vitals", "url": "https://web.dev/vitals/"}]
        assert record["published_at"] == "2024-02-01T10:00:00+00:00"
        assert record["republished_at"] is None
