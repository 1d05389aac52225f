"""Derivation of canonical proposal identifiers.

Each rule inspects an :class:`IdentifierContext` and either returns a canonical id or
``None``. Rules are tried in order and the first hit wins:

1. numeric header field (``sip`` / ``sui_ip`` / ``id``)
2. numeric token in the file name
3. ``SIP-<n>`` in the change-request title (change-request documents only)
4. the change-request number (change-request documents with a header only)
5. slugified file name, ``sip-generic-`` prefixed (folder documents only)
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final

from siptrack.domain.model import SourceKind

NUMERIC_PREFIX: Final[str] = "sip-"
GENERIC_PREFIX: Final[str] = "sip-generic-"
HEADER_ID_FIELDS: Final[tuple[str, ...]] = ("sip", "sui_ip", "id")

_HEADER_NUMBER = re.compile(r"^(?:sip[-_\s:]?)?(\d+)$", re.IGNORECASE)
_FILE_NAME_NUMBER = re.compile(r"^(?:sip[-_]?)?(\d+)(?=[.\-_\s]|$)", re.IGNORECASE)
_TITLE_NUMBER = re.compile(r"SIP[-\s:]?(\d+)", re.IGNORECASE)
_NUMERIC_ID = re.compile(r"^sip-(\d+)$", re.IGNORECASE)
_SLUG_SEPARATORS = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True, slots=True, kw_only=True)
class IdentifierContext:
    file_name: str | None
    source_kind: SourceKind
    header: Mapping[str, object] = field(default_factory=dict)
    change_request_title: str | None = None
    change_request_number: int | None = None


type IdentifierRule = Callable[[IdentifierContext], str | None]


def format_numeric_id(number: int | str) -> str:
    return f"{NUMERIC_PREFIX}{int(number):03d}"


def slugify(value: str) -> str:
    ascii_text = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    return _SLUG_SEPARATORS.sub("-", ascii_text.lower()).strip("-")


def generic_id(value: str) -> str | None:
    slug = slugify(value)
    if not slug:
        return None
    if slug.startswith(GENERIC_PREFIX):
        return slug
    return f"{GENERIC_PREFIX}{slug}"


def numeric_part(canonical_id: str) -> int | None:
    """Return ``n`` for ``sip-n`` ids and ``None`` for generic ones."""

    match = _NUMERIC_ID.match(canonical_id)
    return int(match.group(1)) if match else None


def from_header_field(context: IdentifierContext) -> str | None:
    for name in HEADER_ID_FIELDS:
        value = context.header.get(name)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, int):
            return format_numeric_id(value) if value >= 0 else None
        if isinstance(value, str):
            match = _HEADER_NUMBER.match(value.strip())
            if match:
                return format_numeric_id(match.group(1))
    return None


def from_file_name(context: IdentifierContext) -> str | None:
    if not context.file_name:
        return None
    match = _FILE_NAME_NUMBER.match(context.file_name.strip())
    return format_numeric_id(match.group(1)) if match else None


def from_change_request_title(context: IdentifierContext) -> str | None:
    if not context.source_kind.is_change_request or not context.change_request_title:
        return None
    match = _TITLE_NUMBER.search(context.change_request_title)
    return format_numeric_id(match.group(1)) if match else None


def from_change_request_number(context: IdentifierContext) -> str | None:
    if context.change_request_number is None:
        return None
    if context.source_kind is SourceKind.CHANGE_REQUEST_DOCUMENT and not context.header:
        # a header-less file touched by a change request is not a proposal
        return None
    if not context.source_kind.is_change_request:
        return None
    return format_numeric_id(context.change_request_number)


def from_file_slug(context: IdentifierContext) -> str | None:
    if not context.source_kind.is_folder or not context.file_name:
        return None
    stem = context.file_name.rsplit(".", 1)[0] if "." in context.file_name else context.file_name
    return generic_id(stem)


DEFAULT_RULES: Final[tuple[IdentifierRule, ...]] = (
    from_header_field,
    from_file_name,
    from_change_request_title,
    from_change_request_number,
    from_file_slug,
)


def resolve_identifier(
    context: IdentifierContext,
    *,
    rules: Sequence[IdentifierRule] = DEFAULT_RULES,
) -> str | None:
    """Return the canonical id for ``context``; ``None`` means "not a distinct proposal"."""

    for rule in rules:
        candidate = rule(context)
        if candidate:
            return candidate
    return None


def normalize_lookup_id(value: str) -> str:
    """Normalise user input (``"7"``, ``"07"``, ``"SIP-007"``, a slug) to a canonical id."""

    text = value.strip()
    match = _HEADER_NUMBER.match(text)
    if match:
        return format_numeric_id(match.group(1))
    return generic_id(text) or ""


__all__ = [
    "DEFAULT_RULES",
    "GENERIC_PREFIX",
    "IdentifierContext",
    "IdentifierRule",
    "format_numeric_id",
    "generic_id",
    "normalize_lookup_id",
    "numeric_part",
    "resolve_identifier",
    "slugify",
]
