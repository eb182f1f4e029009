"""Header block codec: YAML front matter at the top of content files.

The textual form is a YAML document between two ``---`` lines, followed by
the body::

    ---
    Title: Hello world
    Author: Jane
    Date: 2024-01-05
    Tags:
      - intro
    Options:
      hide: false
    ---

    Body text.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, NamedTuple

import frontmatter
import yaml

from .errors import HeaderError, HeaderParseError
from .models import OPTIONS_RECIPE, Date, Diagnostic, Header, slugify

log = logging.getLogger(__name__)

KNOWN_KEYS = ("Title", "Author", "Date", "Tags", "Options")

__all__ = [
    "ParsedDocument",
    "dump_document",
    "dump_header",
    "load_header",
    "parse_document",
    "slugify",
]


class ParsedDocument(NamedTuple):
    """A content file split into its header and body."""

    header: Header
    body: str
    diagnostics: list[Diagnostic]


def parse_document(text: str, source: Path | str | None = None) -> ParsedDocument:
    """Parse a content file's text.

    Args:
        text: Full file text, header block first.
        source: Where the text came from, used in messages only.

    Returns:
        The header, the body, and warnings for unrecognized keys.

    Raises:
        HeaderParseError: If the header block is missing or malformed, or
            the header violates the title/date rules.
    """
    if not frontmatter.checks(text):
        raise HeaderParseError(source, "Missing header (YAML block required at start of file)")

    try:
        post = frontmatter.loads(text)
    except Exception as e:
        raise HeaderParseError(source, f"Failed to parse header: {e}") from e

    raw = dict(post.metadata)
    diagnostics: list[Diagnostic] = []
    source_label = str(source) if source is not None else None

    for key in raw:
        if key not in KNOWN_KEYS:
            diagnostics.append(
                Diagnostic(
                    code="unknown-header-key",
                    message=f"Unexpected key in header: {key}",
                    source=source_label,
                )
            )

    options = raw.get("Options")
    if options is not None and not isinstance(options, dict):
        raise HeaderParseError(source, f"Options must be a mapping, got {type(options).__name__}")
    for key in options or {}:
        if key not in OPTIONS_RECIPE:
            diagnostics.append(
                Diagnostic(
                    code="unknown-option",
                    message=f"Unexpected key in header: Options.{key}",
                    source=source_label,
                )
            )

    try:
        date = Date.coerce(raw.get("Date"))
    except ValueError as e:
        raise HeaderParseError(source, str(e)) from e

    try:
        header = Header(
            title=_as_text(raw.get("Title")),
            author=_as_text(raw.get("Author")),
            date=date,
            tags=raw.get("Tags"),
            options=options or {},
        )
    except HeaderError as e:
        raise HeaderParseError(source, str(e)) from e

    for diagnostic in diagnostics:
        log.warning("%s", diagnostic)

    return ParsedDocument(header=header, body=post.content, diagnostics=diagnostics)


def load_header(source: Path | str) -> Header:
    """Load a header from a file path or from text.

    Raises:
        HeaderParseError: If the source cannot be read or parsed.
    """
    if isinstance(source, os.PathLike):
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise HeaderParseError(path, f"Cannot read: {e}") from e
        return parse_document(text, path).header
    return parse_document(source).header


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _yaml_quote_if_needed(value: str) -> str:
    """Quote a scalar if YAML would not read it back as the same string."""
    try:
        parsed = yaml.safe_load(f"key: {value}")
        if isinstance(parsed, dict) and parsed.get("key") == value:
            return value
    except yaml.YAMLError:
        pass
    dumped = yaml.safe_dump({"key": value}, default_flow_style=False, width=10_000).strip()
    return dumped[5:]


def _format_yaml_list(items: list[str]) -> str:
    return "\n".join(f"  - {_yaml_quote_if_needed(item)}" for item in items)


def dump_header(header: Header) -> str:
    """Serialize a header to its textual block.

    Absent optional fields are omitted. The result ends with the closing
    ``---`` line and a newline.
    """
    parts = ["---"]

    if header.title is not None:
        parts.append(f"Title: {_yaml_quote_if_needed(header.title)}")
    if header.author is not None:
        parts.append(f"Author: {_yaml_quote_if_needed(header.author)}")
    if header.date is not None:
        parts.append(f"Date: {header.date.repr('-')}")
    if header.tags:
        parts.append("Tags:")
        parts.append(_format_yaml_list(header.tags))
    if header.options:
        options = yaml.safe_dump(
            {"Options": dict(header.options)},
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        parts.append(options.rstrip("\n"))

    parts.append("---\n")
    return "\n".join(parts)


def dump_document(header: Header, body: str) -> str:
    """Serialize a header followed by a body."""
    text = dump_header(header)
    body = body.lstrip("\n")
    if body:
        text += "\n" + body
        if not text.endswith("\n"):
            text += "\n"
    return text
