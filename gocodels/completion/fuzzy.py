"""
Fuzzy refiltering of cached suggestions, backed by rapidfuzz.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

from rapidfuzz import fuzz, process, utils


T = TypeVar("T")

# Minimum partial_ratio (0-100) for a suggestion to survive refiltering
SCORE_CUTOFF = 75


def fuzzy_filter(items: Sequence[T], query: str, key: str) -> list[T]:
    """
    Keep the items whose `key` attribute matches `query`, best first.

    Items without a key are dropped. Equal scores keep their input order.
    """
    keyed = [(item, getattr(item, key, None)) for item in items]
    keyed = [(item, text) for item, text in keyed if text]
    if not query:
        return [item for item, _ in keyed]

    matches = process.extract(
        query,
        [text for _, text in keyed],
        scorer=fuzz.partial_ratio,
        processor=utils.default_process,
        score_cutoff=SCORE_CUTOFF,
        limit=None,
    )
    matches.sort(key=lambda match: (-match[1], match[2]))
    return [keyed[index][0] for _, _, index in matches]
