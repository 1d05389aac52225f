"""Domain port definitions for adapters."""

from __future__ import annotations

from .repository import (
    ChangedFile,
    ChangeRequest,
    RepositoryClient,
    RepositoryEntry,
    RepositoryLinks,
)
from .summarizer import Summarizer

__all__ = [
    "ChangeRequest",
    "ChangedFile",
    "RepositoryClient",
    "RepositoryEntry",
    "RepositoryLinks",
    "Summarizer",
]
