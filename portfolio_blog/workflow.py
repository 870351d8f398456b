"""
Authoring state machine for documents.

A document is either a draft or published:

    create     -> draft
    edit       -> same state, unless the patch toggles is_draft
    publish    draft -> published
    republish  published -> published

published_at is stamped by the first publish only. republish moves
updated_at and republished_at and leaves published_at alone. Calling
publish on a published document, or republish on a draft, raises
InvalidTransitionError.

Transitions are pure: they take a Document and return a new one. Storing
the result is the job of portfolio_blog.services.
"""
import uuid
from dataclasses import dataclass, fields, replace
from typing import Callable, Optional

from django.core.exceptions import PermissionDenied
from django.utils import timezone

from .conf import blog_settings
from .documents import DRAFT, Document, HeroImage
from .exceptions import InvalidTransitionError, SlugLockedError


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class AuthoringContext:
    """
    Who is acting and what time it is.

    is_admin comes from the auth collaborator; clock defaults to
    django.utils.timezone.now.
    """

    is_admin: bool
    clock: Callable = timezone.now

    @classmethod
    def from_request(cls, request):
        user = getattr(request, "user", None)
        is_admin = bool(user is not None and user.is_authenticated and user.is_staff)
        return cls(is_admin=is_admin)

    def now(self):
        return self.clock()

    def require_admin(self):
        if not self.is_admin:
            raise PermissionDenied("An authenticated admin session is required")


@dataclass(frozen=True)
class PostFields:
    """Initial values for a new document."""

    title: str = ""
    slug: str = ""
    excerpt: str = ""
    content: tuple = ()
    tags: tuple = ()
    hero_image: Optional[HeroImage] = None
    has_sources: bool = False
    sources: tuple = ()
    has_notes: bool = False
    notes: str = ""


@dataclass(frozen=True)
class PostPatch:
    """
    Partial update of a document.

    Only the fields listed here can be patched; id and timestamps are not
    patchable. A slug change is refused once the document has been
    published. Setting is_draft toggles between draft and published.
    """

    title: object = UNSET
    slug: object = UNSET
    excerpt: object = UNSET
    content: object = UNSET
    tags: object = UNSET
    hero_image: object = UNSET
    has_sources: object = UNSET
    sources: object = UNSET
    has_notes: object = UNSET
    notes: object = UNSET
    is_draft: object = UNSET

    def changes(self):
        """Return {field name: value} for the fields that were set."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


def _normalize(values):
    """Coerce sequence fields to tuples so documents stay hashable and comparable."""
    for name in ("content", "sources"):
        if name in values:
            values[name] = tuple(values[name])
    if "tags" in values:
        values["tags"] = tuple(dict.fromkeys(tag.strip() for tag in values["tags"] if tag.strip()))
    return values


def _draft_slug(now):
    return f"{blog_settings.DRAFT_SLUG_PREFIX}{int(now.timestamp() * 1000)}"


def create(ctx, post_fields=None):
    """Return a new draft document."""
    ctx.require_admin()
    post_fields = post_fields or PostFields()
    now = ctx.now()

    values = _normalize({f.name: getattr(post_fields, f.name) for f in fields(post_fields)})
    values["title"] = values["title"] or blog_settings.DRAFT_TITLE
    values["slug"] = values["slug"] or _draft_slug(now)

    return Document(
        id=str(uuid.uuid4()),
        is_draft=True,
        published_at=None,
        created_at=now,
        updated_at=now,
        **values,
    )


def _publish(document, now):
    if not document.is_draft:
        raise InvalidTransitionError(
            "Document is already published; use republish instead.",
            transition="publish",
            state=document.state,
        )
    return replace(
        document,
        is_draft=False,
        published_at=document.published_at or now,
        updated_at=now,
    )


def edit(ctx, document, patch):
    """
    Apply a PostPatch to a document.

    is_draft=False on a draft publishes it; is_draft=True on a published
    document takes it offline and keeps published_at.

    Raises:
        SlugLockedError: the slug changes on a document that has been published
    """
    ctx.require_admin()
    changes = _normalize(patch.changes())
    is_draft = changes.pop("is_draft", UNSET)

    new_slug = changes.get("slug", document.slug)
    if new_slug != document.slug and document.has_been_published:
        raise SlugLockedError(
            "The slug cannot change after the document has been published.",
            transition="edit",
            state=document.state,
        )

    now = ctx.now()
    updated = replace(document, updated_at=now, **changes)

    if is_draft is UNSET or bool(is_draft) == document.is_draft:
        return updated
    if not is_draft:
        return _publish(updated, now)
    return replace(updated, is_draft=True)


def publish(ctx, document):
    """Move a draft to published, stamping published_at on the first publish."""
    ctx.require_admin()
    return _publish(document, ctx.now())


def republish(ctx, document):
    """Re-affirm a published document after a correction."""
    ctx.require_admin()
    if document.is_draft:
        raise InvalidTransitionError(
            "Only published documents can be republished.",
            transition="republish",
            state=DRAFT,
        )
    now = ctx.now()
    return replace(document, updated_at=now, republished_at=now)

