"""
Form-level validation for documents about to be saved.

Drafts are checked leniently: only the optional sections and a changed
slug. A document that is (or becomes) published must also have a proper
title, a valid unique slug and a non-empty body.
"""
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator, URLValidator

from .blocks import block_is_empty
from .conf import blog_settings

slug_pattern_validator = RegexValidator(
    regex=r"^[a-z0-9]+(?:-[a-z0-9]+)*$",
    message="Slug can only contain lowercase letters, numbers, and hyphens",
    code="invalid_slug",
)

url_validator = URLValidator()


def validate_slug(slug):
    """Raise ValidationError unless slug is well formed."""
    if not slug or not slug.strip():
        raise ValidationError("Slug is required", code="required")
    if len(slug) < blog_settings.SLUG_MIN_LENGTH:
        raise ValidationError(
            f"Slug must be at least {blog_settings.SLUG_MIN_LENGTH} characters long",
            code="min_length",
        )
    if len(slug) > blog_settings.SLUG_MAX_LENGTH:
        raise ValidationError(
            f"Slug must be less than {blog_settings.SLUG_MAX_LENGTH} characters",
            code="max_length",
        )
    slug_pattern_validator(slug)


def is_valid_url(url):
    try:
        url_validator(url)
    except ValidationError:
        return False
    return True


def _title_errors(title):
    if not title.strip():
        return ["Title is required"]
    if len(title) < blog_settings.TITLE_MIN_LENGTH:
        return [f"Title must be at least {blog_settings.TITLE_MIN_LENGTH} characters"]
    if len(title) > blog_settings.TITLE_MAX_LENGTH:
        return [f"Title must be less than {blog_settings.TITLE_MAX_LENGTH} characters"]
    return []


def _slug_errors(document, repository):
    try:
        validate_slug(document.slug)
    except ValidationError as exc:
        return list(exc.messages)
    if repository.slug_exists(document.slug, exclude_id=document.id):
        return ["This slug is already in use"]
    return []


def _content_errors(document):
    if not document.content:
        return ["At least one content block is required"]
    if any(block_is_empty(block) for block in document.content):
        return ["Some content blocks are empty. Please fill them in or remove them."]
    return []


def _sources_errors(document):
    complete = [s for s in document.sources if s.title.strip() and s.url.strip()]
    if not complete:
        return ["At least one complete source (with title and URL) is required when sources are enabled"]
    if any(s.url.strip() and not is_valid_url(s.url) for s in document.sources):
        return ["Some source URLs are invalid. Please fix them or remove the sources."]
    return []


def validate_document(document, repository, slug_changed=False):
    """
    Check a candidate document before it is stored.

    Args:
        document: candidate Document
        repository: PostRepository used for the slug uniqueness check
        slug_changed: whether this save changes (or sets) the slug

    Raises:
        ValidationError: mapping field name to messages
    """
    strict = not document.is_draft
    errors = {}

    if strict:
        errors["title"] = _title_errors(document.title)
        errors["content"] = _content_errors(document)
    if strict or slug_changed:
        errors["slug"] = _slug_errors(document, repository)
    if document.has_sources:
        errors["sources"] = _sources_errors(document)
    if document.has_notes and not document.notes.strip():
        errors["notes"] = ["Notes content is required when notes section is enabled"]

    errors = {name: messages for name, messages in errors.items() if messages}
    if errors:
        raise ValidationError(errors)
