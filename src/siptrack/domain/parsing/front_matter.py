"""Split a markdown document into its YAML header and free-text body."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

import yaml

if TYPE_CHECKING:
    from yaml.nodes import ScalarNode

_DELIMITER: Final[str] = "---"
_DECIMAL_INT = re.compile(r"^[-+]?[0-9]+$")
_INT_TAG: Final[str] = "tag:yaml.org,2002:int"


class FrontMatterError(ValueError):
    """Raised when a document header is present but cannot be read."""


class _HeaderLoader(yaml.SafeLoader):
    """SafeLoader that reads integers as decimal, so ``sip: 012`` is 12 rather than octal."""


def _construct_decimal_int(loader: yaml.SafeLoader, node: ScalarNode) -> int:
    return int(str(loader.construct_scalar(node)), 10)


_HeaderLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_HeaderLoader.add_implicit_resolver(_INT_TAG, _DECIMAL_INT, list("-+0123456789"))
_HeaderLoader.add_constructor(_INT_TAG, _construct_decimal_int)


def split_front_matter(text: str) -> tuple[dict[str, object], str]:
    """Return ``(header, body)``.

    A document without a leading ``---`` block has an empty header and its whole text
    as body. A header block that is not valid YAML, or not a mapping, raises
    :class:`FrontMatterError`.
    """

    normalized = text.lstrip("\ufeff").replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not lines or lines[0].strip() != _DELIMITER:
        return {}, normalized

    for index in range(1, len(lines)):
        if lines[index].strip() in {_DELIMITER, "..."}:
            raw_header = "\n".join(lines[1:index])
            body = "\n".join(lines[index + 1 :])
            return _load_header(raw_header), body.lstrip("\n")

    return {}, normalized


def _load_header(raw_header: str) -> dict[str, object]:
    if not raw_header.strip():
        return {}
    try:
        loaded = yaml.load(raw_header, Loader=_HeaderLoader)  # noqa: S506
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid YAML header: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise FrontMatterError(f"Header must be a mapping, got {type(loaded).__name__}")
    return {str(key).strip().lower(): value for key, value in loaded.items()}


__all__ = ["FrontMatterError", "split_front_matter"]
