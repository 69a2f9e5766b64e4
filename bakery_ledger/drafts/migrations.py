"""Schema migrations for persisted draft blobs.

Each step takes a blob of version N and returns a blob of version N + 1. Drafts
whose shape does not fit the next version are dropped, never converted.
"""
from __future__ import annotations

from typing import Callable, Dict

from ..logging import get_logger

Migration = Callable[[dict], dict]


def discard_drafts_without_items(blob: dict) -> dict:
    """Version 1 -> 2: single quantity/price drafts became product-line carts."""
    drafts = blob.get("draftOrders") or {}
    kept = {
        customer_id: draft
        for customer_id, draft in drafts.items()
        if isinstance(draft, dict) and isinstance(draft.get("items"), list)
    }
    dropped = sorted(set(drafts) - set(kept))
    if dropped:
        get_logger(__name__).warning(
            f"Discarding {len(dropped)} draft(s) without an items list: {', '.join(dropped)}"
        )
    return {**blob, "version": 2, "draftOrders": kept}


CART_MIGRATIONS: Dict[int, Migration] = {
    1: discard_drafts_without_items,
}


def migrate(blob: dict, target_version: int, steps: Dict[int, Migration]) -> dict:
    """Apply migration steps until ``blob`` reaches ``target_version``.

    A version with no registered step cannot be upgraded: every draft in it is
    discarded.
    """
    version = blob.get("version")
    if not isinstance(version, int):
        version = 0
    while version < target_version:
        step = steps.get(version)
        if step is None:
            get_logger(__name__).warning(
                f"No migration from draft schema v{version}; discarding all stored drafts"
            )
            return {"version": target_version, "draftOrders": {}}
        blob = step(blob)
        version = blob["version"]
    return blob
