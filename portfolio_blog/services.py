"""
Authoring service: runs workflow transitions and stores the results.

Every write goes through the same parse path as every read: the candidate
document is serialized, parsed back with parse_document(), and what is
stored is the parsed result. A published document is never stored with
blocks the reader would drop.
"""
import logging

from django.core.exceptions import ValidationError

from . import workflow
from .documents import parse_document, serialize_document
from .loader import load_document
from .uploads import process_hero_image, upload_image
from .validators import validate_document

logger = logging.getLogger(__name__)


class AuthoringService:
    """
    Admin operations on documents.

    Args:
        repository: PostRepository (Django ORM by default)
        storage: StorageBackend for uploads (Django storage by default)
    """

    def __init__(self, repository=None, storage=None):
        if repository is None:
            from .repository import default_repository

            repository = default_repository
        self.repository = repository
        self.storage = storage

    def get(self, identifier):
        return load_document(identifier, repository=self.repository)

    def _check(self, candidate, previous=None, content_warnings=()):
        """Validate a candidate and round-trip it through the parser."""
        slug_changed = previous is None or previous.slug != candidate.slug
        validate_document(candidate, self.repository, slug_changed=slug_changed)

        checked = parse_document(serialize_document(candidate))
        dropped = list(content_warnings) + [w for w in checked.warnings if w.field == "content"]
        if dropped and not checked.is_draft:
            raise ValidationError({"content": [str(warning) for warning in dropped]})
        for warning in dropped:
            logger.warning("Draft %s saved without block: %s", checked.slug, warning)
        return checked

    def store(self, checked):
        """Store a document returned by check_create() or check_edit()."""
        stored = self.repository.upsert(serialize_document(checked))
        return parse_document(stored)

    def check_create(self, ctx, post_fields=None, content_warnings=()):
        """Return the draft create_post() would store, without storing it."""
        return self._check(workflow.create(ctx, post_fields), content_warnings=content_warnings)

    def check_edit(self, ctx, identifier, patch, content_warnings=()):
        """Return the document edit_post() would store, without storing it."""
        ctx.require_admin()
        current = self.get(identifier)
        document = workflow.edit(ctx, current, patch)
        return self._check(document, previous=current, content_warnings=content_warnings)

    def create_post(self, ctx, post_fields=None, content_warnings=()):
        """Create and store a new draft."""
        saved = self.store(self.check_create(ctx, post_fields, content_warnings))
        logger.info("Created draft %s", saved.slug)
        return saved

    def edit_post(self, ctx, identifier, patch, content_warnings=()):
        """Apply a PostPatch to a stored document."""
        return self.store(self.check_edit(ctx, identifier, patch, content_warnings))

    def publish_post(self, ctx, identifier):
        ctx.require_admin()
        current = self.get(identifier)
        saved = self.store(self._check(workflow.publish(ctx, current), previous=current))
        logger.info("Published %s", saved.slug)
        return saved

    def republish_post(self, ctx, identifier):
        ctx.require_admin()
        current = self.get(identifier)
        saved = self.store(self._check(workflow.republish(ctx, current), previous=current))
        logger.info("Republished %s", saved.slug)
        return saved

    def attach_hero_image(self, ctx, identifier, uploaded_file):
        """Process and store a hero image, then point the document at it."""
        ctx.require_admin()
        # Unknown posts fail before anything reaches storage
        self.get(identifier)
        hero_image = process_hero_image(uploaded_file, storage=self.storage)
        return self.edit_post(ctx, identifier, workflow.PostPatch(hero_image=hero_image))

    def upload_inline_image(self, ctx, uploaded_file):
        """Store an image for an image block and return its URL."""
        ctx.require_admin()
        return upload_image(uploaded_file, storage=self.storage)
