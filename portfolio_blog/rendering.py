"""
Renderer from documents to presentation units.

Rendering is a pure function of a validated Document. Templates call
as_html() on each unit; tests inspect the units directly.
"""
from dataclasses import dataclass
from typing import Optional, Union, assert_never

from django.utils.html import format_html, format_html_join
from django.utils.safestring import mark_safe

from .blocks import BodyBlock, ContentBlock, ImageBlock, ListBlock, SubtitleBlock


@dataclass(frozen=True)
class Heading:
    text: str

    def as_html(self):
        return format_html("<h2>{}</h2>", self.text)


@dataclass(frozen=True)
class Paragraph:
    text: str

    def as_html(self):
        return format_html("<p>{}</p>", self.text)


@dataclass(frozen=True)
class BulletList:
    items: tuple

    def as_html(self):
        return format_html(
            "<ul>{}</ul>",
            format_html_join("", "<li>{}</li>", ((item,) for item in self.items)),
        )


@dataclass(frozen=True)
class Figure:
    url: str
    alt_text: str = ""

    def as_html(self):
        return format_html(
            '<figure><img src="{}" alt="{}" loading="lazy"></figure>',
            self.url,
            self.alt_text,
        )


@dataclass(frozen=True)
class SourcesSection:
    sources: tuple
    title = "Sources"

    def as_html(self):
        links = format_html_join(
            "",
            '<li><a href="{}" target="_blank" rel="noopener noreferrer">{}</a></li>',
            ((source.url, source.title) for source in self.sources),
        )
        return format_html('<section class="sources"><h2>{}</h2><ul>{}</ul></section>', self.title, links)


@dataclass(frozen=True)
class NotesSection:
    text: str
    title = "Notes"

    def as_html(self):
        return format_html('<section class="notes"><h2>{}</h2><p>{}</p></section>', self.title, self.text)


PresentationUnit = Union[Heading, Paragraph, BulletList, Figure, SourcesSection, NotesSection]


def _render_content_block(block: ContentBlock) -> Optional[PresentationUnit]:
    if isinstance(block, SubtitleBlock):
        return Heading(block.text)
    elif isinstance(block, BodyBlock):
        return Paragraph(block.text)
    elif isinstance(block, ListBlock):
        if not block.items:
            return None
        return BulletList(block.items)
    elif isinstance(block, ImageBlock):
        return Figure(url=block.url, alt_text=block.alt_text or "")
    else:
        assert_never(block)


def render_block(block) -> Optional[PresentationUnit]:
    """Map one content block to its presentation unit, or None."""
    if not isinstance(block, (SubtitleBlock, BodyBlock, ListBlock, ImageBlock)):
        return None
    return _render_content_block(block)


def render_document(document):
    """
    Render a document body followed by its optional sections.

    Units follow the order of document.content. The Sources section is
    appended only when has_sources is set and at least one source exists;
    the Notes section only when has_notes is set and notes are not blank.
    """
    units = []
    for block in document.content:
        unit = render_block(block)
        if unit is not None:
            units.append(unit)

    if document.visible_sources:
        units.append(SourcesSection(document.visible_sources))
    if document.visible_notes:
        units.append(NotesSection(document.visible_notes))
    return units


def render_document_html(document):
    """Return the rendered body of a document as safe HTML."""
    return mark_safe("".join(unit.as_html() for unit in render_document(document)))
