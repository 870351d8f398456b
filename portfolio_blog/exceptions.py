"""
Error types for django-portfolio-blog.

Authorization failures use django.core.exceptions.PermissionDenied and
form-level problems use django.core.exceptions.ValidationError; everything
specific to the content core lives here.
"""
from dataclasses import dataclass
from typing import Optional


class PortfolioBlogError(Exception):
    """Base class for portfolio_blog errors."""


class NotFoundError(PortfolioBlogError):
    """No document matches the requested slug or id."""

    def __init__(self, identifier):
        self.identifier = identifier
        super().__init__(f"No document found for {identifier!r}")


class BlockValidationError(PortfolioBlogError):
    """A raw value could not be classified as a content block."""


class InvalidTransitionError(PortfolioBlogError):
    """An authoring transition was attempted from a state that forbids it."""

    def __init__(self, message, transition=None, state=None):
        self.transition = transition
        self.state = state
        super().__init__(message)


class SlugLockedError(InvalidTransitionError):
    """The slug of a document that has been published cannot change."""


class UploadRejected(PortfolioBlogError):
    """A file failed the upload validation gate."""

    def __init__(self, reason, code):
        self.reason = reason
        self.code = code
        super().__init__(reason)


class CollaboratorFailure(PortfolioBlogError):
    """A persistence or storage call failed."""


@dataclass(frozen=True)
class ValidationWarning:
    """
    Non-fatal problem found while parsing a stored document.

    `index` is the position of the offending block or source entry, when
    the problem concerns one element of a sequence.
    """

    field: str
    message: str
    index: Optional[int] = None

    def __str__(self):
        if self.index is None:
            return f"{self.field}: {self.message}"
        return f"{self.field}[{self.index}]: {self.message}"
