"""
Persistence collaborator for portfolio_blog.

The content core only talks to a PostRepository. Records are plain dicts in
the shape produced by documents.serialize_document(); the repository stores
them without interpreting block content.
"""
import logging
import uuid
from typing import Optional, Protocol

from django.db import DatabaseError, transaction
from django.utils.dateparse import parse_datetime

from .exceptions import CollaboratorFailure
from .models import Post
from .models.posts import RECORD_FIELDS

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("published_at", "created_at", "updated_at", "republished_at")


class PostRepository(Protocol):
    def get_by_identifier(self, identifier: str) -> Optional[dict]:
        ...

    def upsert(self, record: dict) -> dict:
        ...

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        ...

    def list_records(self, include_drafts: bool = False) -> list:
        ...


def _as_uuid(identifier):
    try:
        return uuid.UUID(str(identifier))
    except ValueError:
        return None


class DjangoPostRepository:
    """PostRepository backed by the Post model."""

    def get_by_identifier(self, identifier):
        """
        Return the record whose slug or id equals identifier, or None.

        Slugs are tried first; the match is exact and case-sensitive.
        """
        try:
            post = Post.objects.filter(slug=identifier).first()
            if post is None:
                pk = _as_uuid(identifier)
                if pk is not None:
                    post = Post.objects.filter(pk=pk).first()
        except DatabaseError as exc:
            raise CollaboratorFailure(f"Could not load post {identifier!r}") from exc

        if post is None:
            return None
        return post.to_record()

    def upsert(self, record):
        """Insert or update the row for record["id"] and return it."""
        values = {name: record[name] for name in RECORD_FIELDS if name in record}
        for name in TIMESTAMP_FIELDS:
            if isinstance(values.get(name), str):
                values[name] = parse_datetime(values[name])

        try:
            with transaction.atomic():
                post, created = Post.objects.update_or_create(
                    pk=record["id"],
                    defaults=values,
                )
        except DatabaseError as exc:
            raise CollaboratorFailure(f"Could not save post {record.get('slug')!r}") from exc

        logger.info("%s post %s (%s)", "Created" if created else "Updated", post.slug, post.pk)
        return post.to_record()

    def slug_exists(self, slug, exclude_id=None):
        qs = Post.objects.filter(slug=slug)
        if exclude_id:
            qs = qs.exclude(pk=exclude_id)
        try:
            return qs.exists()
        except DatabaseError as exc:
            raise CollaboratorFailure(f"Could not check slug {slug!r}") from exc

    def list_records(self, include_drafts=False):
        qs = Post.objects.all()
        if not include_drafts:
            qs = qs.filter(is_draft=False)
        try:
            return [post.to_record() for post in qs.order_by("-published_at", "-created_at")]
        except DatabaseError as exc:
            raise CollaboratorFailure("Could not list posts") from exc


default_repository = DjangoPostRepository()
