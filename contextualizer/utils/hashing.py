"""Stable hashing used for deterministic candidate selection."""

from hashlib import sha256
from typing import Sequence, TypeVar

T = TypeVar("T")


def sha256_text(text: str) -> str:
    return sha256(text.encode("utf-8")).hexdigest()


def stable_index(seed_parts: Sequence[str], size: int) -> int:
    """Map seed parts to an index in [0, size).

    The same parts always give the same index, across processes and
    interpreter runs (unlike the builtin hash()).
    """
    if size <= 0:
        raise ValueError(f"size must be positive, got {size}")
    digest = sha256_text("\x1f".join(seed_parts))
    return int(digest[:16], 16) % size


def select(items: Sequence[T], seed_parts: Sequence[str]) -> T:
    """Deterministically pick one item."""
    return items[stable_index(seed_parts, len(items))]
