"""
Admin form turning a submitted payload into PostFields / PostPatch values.
"""
from collections.abc import Mapping

from django import forms

from .blocks import parse_blocks
from .documents import HeroImage, Source
from .workflow import PostFields, PostPatch

PATCHABLE = (
    "title",
    "slug",
    "excerpt",
    "content",
    "tags",
    "has_sources",
    "sources",
    "has_notes",
    "notes",
    "is_draft",
)


class PostForm(forms.Form):
    """
    Accepts the admin editor payload.

    Every field is optional so the same form serves create and partial
    edit. Content blocks that fail the schema are dropped here and kept in
    `block_warnings`; the service decides whether that is acceptable.
    """

    title = forms.CharField(required=False, max_length=255)
    slug = forms.CharField(required=False, max_length=255)
    excerpt = forms.CharField(required=False, widget=forms.Textarea)
    content = forms.JSONField(required=False)
    tags = forms.JSONField(required=False)
    hero_image_large = forms.CharField(required=False, max_length=500)
    hero_image_thumbnail = forms.CharField(required=False, max_length=500)
    has_sources = forms.BooleanField(required=False)
    sources = forms.JSONField(required=False)
    has_notes = forms.BooleanField(required=False)
    notes = forms.CharField(required=False, strip=False, widget=forms.Textarea)
    is_draft = forms.BooleanField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.block_warnings = []

    def clean_content(self):
        raw = self.cleaned_data.get("content")
        if raw is None:
            return ()
        if not isinstance(raw, list):
            raise forms.ValidationError("Content must be a list of blocks.")
        blocks, self.block_warnings = parse_blocks(raw)
        return blocks

    def clean_tags(self):
        raw = self.cleaned_data.get("tags")
        if raw is None:
            return ()
        if not isinstance(raw, list) or not all(isinstance(tag, str) for tag in raw):
            raise forms.ValidationError("Tags must be a list of strings.")
        return tuple(raw)

    def clean_sources(self):
        raw = self.cleaned_data.get("sources")
        if raw is None:
            return ()
        if not isinstance(raw, list) or not all(isinstance(item, Mapping) for item in raw):
            raise forms.ValidationError("Sources must be a list of {title, url} objects.")
        return tuple(
            Source(title=str(item.get("title") or ""), url=str(item.get("url") or ""))
            for item in raw
        )

    def _hero_image(self):
        large = self.cleaned_data.get("hero_image_large")
        if not large:
            return None
        return HeroImage(large=large, thumbnail=self.cleaned_data.get("hero_image_thumbnail") or None)

    def to_fields(self):
        """Return PostFields for a new document."""
        data = self.cleaned_data
        return PostFields(
            title=data["title"],
            slug=data["slug"],
            excerpt=data["excerpt"],
            content=data["content"],
            tags=data["tags"],
            hero_image=self._hero_image(),
            has_sources=data["has_sources"],
            sources=data["sources"],
            has_notes=data["has_notes"],
            notes=data["notes"],
        )

    def to_patch(self):
        """Return a PostPatch holding only the fields present in the payload."""
        values = {name: self.cleaned_data[name] for name in PATCHABLE if name in self.data}
        if "hero_image_large" in self.data:
            values["hero_image"] = self._hero_image()
        return PostPatch(**values)
