"""Document parsing: header/body split and canonical record construction."""

from __future__ import annotations

from .front_matter import FrontMatterError, split_front_matter
from .parser import TITLE_RULES, URL_RULES, DocumentContext, DocumentParser

__all__ = [
    "TITLE_RULES",
    "URL_RULES",
    "DocumentContext",
    "DocumentParser",
    "FrontMatterError",
    "split_front_matter",
]
