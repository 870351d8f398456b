"""
Tests for the Post model and the Django repository.
"""
import uuid

import pytest
from django.db import DatabaseError

from portfolio_blog.exceptions import CollaboratorFailure
from portfolio_blog.loader import load_document
from portfolio_blog.models import Post
from portfolio_blog.repository import DjangoPostRepository


@pytest.fixture
def repo():
    return DjangoPostRepository()


@pytest.fixture
def post(db, post_record):
    """Create a test post from the shared record."""
    return Post.objects.get(pk=DjangoPostRepository().upsert(post_record)["id"])


class TestPost:
    """Tests for Post model."""

    def test_defaults(self, db):
        """Test model defaults."""
        post = Post.objects.create(title="Hello", slug="hello")

        assert post.is_draft
        assert post.content == []
        assert post.published_at is None
        assert isinstance(post.pk, uuid.UUID)
        assert post.created_at is not None

    def test_str(self, db):
        """Test string representation."""
        assert str(Post(title="Hello", slug="hello")) == "Hello"
        assert str(Post(slug="untitled")) == "untitled"

    def test_absolute_url(self, post):
        """Test the absolute URL."""
        assert post.get_absolute_url() == "/blog/post/building-a-portfolio/"

    def test_to_record(self, post, post_record):
        """Test the raw record of a row."""
        record = post.to_record()

        assert record["id"] == post_record["id"]
        assert record["content"] == post_record["content"]
        assert record["sources_data"] == post_record["sources_data"]
        assert record["published_at"].isoformat() == post_record["published_at"]


class TestDjangoPostRepository:
    """Tests for DjangoPostRepository."""

    def test_get_by_slug_and_id(self, repo, post, post_record):
        """Test lookup by slug and by id."""
        assert repo.get_by_identifier("building-a-portfolio")["id"] == post_record["id"]
        assert repo.get_by_identifier(post_record["id"])["slug"] == "building-a-portfolio"

    def test_lookup_is_case_sensitive(self, repo, post):
        """Test that lookup is case-sensitive."""
        assert repo.get_by_identifier("Building-A-Portfolio") is None

    def test_missing(self, repo, db):
        """Test a missing identifier."""
        assert repo.get_by_identifier("missing") is None
        assert repo.get_by_identifier(str(uuid.uuid4())) is None

    def test_upsert_updates_existing_row(self, repo, post, post_record):
        """Test updating an existing row."""
        repo.upsert(dict(post_record, title="Renamed"))

        assert Post.objects.count() == 1
        assert Post.objects.get().title == "Renamed"

    def test_duplicate_slug_is_a_collaborator_failure(self, repo, post, post_record):
        """Test a duplicate slug on upsert."""
        other = dict(post_record, id=str(uuid.uuid4()))
        with pytest.raises(CollaboratorFailure):
            repo.upsert(other)

    def test_slug_exists(self, repo, post, post_record):
        """Test slug_exists."""
        assert repo.slug_exists("building-a-portfolio")
        assert not repo.slug_exists("building-a-portfolio", exclude_id=post_record["id"])
        assert not repo.slug_exists("other")

    def test_list_records(self, repo, post, post_record):
        """Test listing records."""
        repo.upsert(dict(post_record, id=str(uuid.uuid4()), slug="a-draft", is_draft=True, published_at=None))

        assert [r["slug"] for r in repo.list_records()] == ["building-a-portfolio"]
        assert len(repo.list_records(include_drafts=True)) == 2

    def test_database_errors_are_wrapped(self, repo, db, monkeypatch):
        """Test wrapping database errors."""
        def broken(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(Post.objects, "filter", broken)
        with pytest.raises(CollaboratorFailure):
            repo.get_by_identifier("anything")

    def test_stored_record_loads_unchanged(self, post, post_record):
        """Test that a stored record loads unchanged."""
        from portfolio_blog.documents import parse_document

        assert load_document("building-a-portfolio") == parse_document(post_record)

    def test_invalid_stored_content_is_dropped_on_load(self, post):
        """Test dropping invalid stored content on load."""
        Post.objects.filter(pk=post.pk).update(content=[
            {"type": "body", "data": {"text": "kept"}},
            {"type": "carousel", "data": {}},
        ])

        document = load_document("building-a-portfolio")
        assert len(document.content) == 1
        assert document.degraded
