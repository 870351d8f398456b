"""
Post model for django-portfolio-blog.

The model is a plain storage row. Parsing, validation and the draft /
publish workflow live outside the ORM so they can run against any
persistence backend; see portfolio_blog.repository.
"""
import uuid

from django.db import models
from django.urls import reverse
from django.utils import timezone

RECORD_FIELDS = (
    "title",
    "slug",
    "content",
    "excerpt",
    "tags",
    "hero_image_large",
    "hero_image_thumbnail",
    "has_sources",
    "sources_data",
    "has_notes",
    "notes_content",
    "is_draft",
    "published_at",
    "created_at",
    "updated_at",
    "republished_at",
)


class Post(models.Model):
    """
    Blog post stored as block content plus metadata.

    `content` holds the raw block list, `sources_data` the raw source
    list. Both are validated on every read by portfolio_blog.documents.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Content
    title = models.CharField(max_length=255, blank=True)
    slug = models.SlugField(max_length=255, unique=True)
    content = models.JSONField(default=list, blank=True)
    excerpt = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)

    # Hero image variants
    hero_image_large = models.CharField(max_length=500, null=True, blank=True)
    hero_image_thumbnail = models.CharField(max_length=500, null=True, blank=True)

    # Optional sections
    has_sources = models.BooleanField(default=False)
    sources_data = models.JSONField(default=list, blank=True)
    has_notes = models.BooleanField(default=False)
    notes_content = models.TextField(blank=True)

    # Status
    is_draft = models.BooleanField(default=True, db_index=True)
    published_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Set by the first publish and never changed afterwards",
    )
    republished_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Last time the published post was re-affirmed",
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-published_at", "-created_at"]
        indexes = [
            models.Index(fields=["is_draft", "-published_at"]),
        ]

    def __str__(self):
        return self.title or self.slug

    def get_absolute_url(self):
        return reverse("portfolio_blog:post_detail", kwargs={"slug": self.slug})

    @property
    def is_published(self):
        return not self.is_draft

    def to_record(self):
        """Return the raw record for this row."""
        record = {name: getattr(self, name) for name in RECORD_FIELDS}
        record["id"] = str(self.pk)
        return record
