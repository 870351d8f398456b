"""
Content block schema for portfolio_blog documents.

A document body is an ordered sequence of blocks. Each block is exactly one
of the variants below. Stored blocks use the nested form

    {"type": "list", "data": {"items": ["a", "b"]}}

and the admin block editor also produces a flat form

    {"id": "block-...", "type": "body", "content": "..."}

Both are accepted by parse_block(); serialize_block() always emits the
nested form.
"""
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

from .exceptions import BlockValidationError, ValidationWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubtitleBlock:
    text: str
    type = "subtitle"


@dataclass(frozen=True)
class BodyBlock:
    text: str
    type = "body"


@dataclass(frozen=True)
class ListBlock:
    items: tuple = field(default_factory=tuple)
    type = "list"


@dataclass(frozen=True)
class ImageBlock:
    url: str
    alt_text: Optional[str] = None
    type = "image"

    def __post_init__(self):
        # Blank alt text is stored as absent
        if self.alt_text == "":
            object.__setattr__(self, "alt_text", None)


ContentBlock = Union[SubtitleBlock, BodyBlock, ListBlock, ImageBlock]

BLOCK_TYPES = ("subtitle", "body", "list", "image")


def _block_data(raw):
    """Return the field mapping of a raw block in either stored form."""
    data = raw.get("data")
    if data is None:
        return raw
    if not isinstance(data, Mapping):
        raise BlockValidationError("block data must be an object")
    return data


def _required_text(data, kind):
    text = data.get("text", data.get("content"))
    if not isinstance(text, str) or not text.strip():
        raise BlockValidationError(f"{kind} block requires non-empty text")
    return text


def _parse_items(data):
    items = data.get("items")
    if isinstance(items, str) or not isinstance(items, Sequence):
        raise BlockValidationError("list block requires a sequence of items")
    if not all(isinstance(item, str) for item in items):
        raise BlockValidationError("list items must be strings")
    return tuple(items)


def _parse_image(data):
    url = data.get("url")
    if not isinstance(url, str) or not url.strip():
        raise BlockValidationError("image block requires a url")
    alt_text = data.get("altText", data.get("alt"))
    if alt_text is not None and not isinstance(alt_text, str):
        raise BlockValidationError("image altText must be a string")
    return ImageBlock(url=url, alt_text=alt_text or None)


def parse_block(raw) -> ContentBlock:
    """
    Classify a raw value as exactly one content block.

    Raises:
        BlockValidationError: unknown tag or malformed data.
    """
    if not isinstance(raw, Mapping):
        raise BlockValidationError("block must be an object")

    kind = raw.get("type")
    if kind not in BLOCK_TYPES:
        raise BlockValidationError(f"unknown block type {kind!r}")

    data = _block_data(raw)
    if kind == "subtitle":
        return SubtitleBlock(text=_required_text(data, kind))
    if kind == "body":
        return BodyBlock(text=_required_text(data, kind))
    if kind == "list":
        return ListBlock(items=_parse_items(data))
    return _parse_image(data)


def parse_blocks(raw_blocks):
    """
    Parse a sequence of raw blocks, dropping the ones that fail.

    Returns:
        (tuple of blocks in input order, list of ValidationWarning)
    """
    blocks = []
    warnings = []
    for index, raw in enumerate(raw_blocks):
        try:
            blocks.append(parse_block(raw))
        except BlockValidationError as exc:
            warning = ValidationWarning(field="content", message=str(exc), index=index)
            logger.warning("Dropping content block: %s", warning)
            warnings.append(warning)
    return tuple(blocks), warnings


def serialize_block(block: ContentBlock) -> dict:
    """Return the stored (nested) form of a block."""
    if isinstance(block, (SubtitleBlock, BodyBlock)):
        data = {"text": block.text}
    elif isinstance(block, ListBlock):
        data = {"items": list(block.items)}
    elif isinstance(block, ImageBlock):
        data = {"url": block.url}
        if block.alt_text:
            data["altText"] = block.alt_text
    else:
        raise TypeError(f"Not a content block: {block!r}")
    return {"type": block.type, "data": data}


def new_block(kind):
    """
    Return an empty editor block of the given kind.

    Empty blocks are not valid content; they are what the editor shows
    before the author fills them in.
    """
    if kind in ("subtitle", "body"):
        return {"type": kind, "data": {"text": ""}}
    if kind == "list":
        return {"type": kind, "data": {"items": [""]}}
    if kind == "image":
        return {"type": kind, "data": {"url": "", "altText": ""}}
    raise BlockValidationError(f"unknown block type {kind!r}")


def block_is_empty(block: ContentBlock) -> bool:
    """A list with no non-blank item counts as empty."""
    if isinstance(block, ListBlock):
        return not any(item.strip() for item in block.items)
    if isinstance(block, ImageBlock):
        return not block.url.strip()
    return not block.text.strip()
