"""Asset identifier normalization.

Every lookup and comparison against an asset identifier goes through
``normalize_asset_id`` so that ``" Bitcoin "`` and ``"bitcoin"`` address the
same asset in snapshots, rules and the cache.
"""

from collections.abc import Iterable


def normalize_asset_id(raw: str) -> str:
    """Normalize an asset identifier to its canonical form.

    Args:
        raw: Asset identifier as received (e.g., " Bitcoin ").

    Returns:
        The trimmed, lower-cased identifier (e.g., "bitcoin").

    Raises:
        ValueError: If the identifier is not a string or is empty once trimmed.
    """
    if not isinstance(raw, str):
        raise ValueError(f"Asset id must be a string, got {type(raw).__name__}")

    normalized = raw.strip().lower()
    if not normalized:
        raise ValueError("Asset id cannot be empty")
    return normalized


def distinct_asset_ids(raw_ids: Iterable[str]) -> list[str]:
    """Normalize and de-duplicate asset ids, keeping first-seen order."""
    seen: dict[str, None] = {}
    for raw in raw_ids:
        seen.setdefault(normalize_asset_id(raw), None)
    return list(seen)
