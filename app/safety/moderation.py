"""Moderation verdict shaping.

Purpose:
    Map a provider moderation result onto the fixed six-category verdict
    exposed by the API.

Validation model:
    - Model-based: flags and scores come from the provider moderation model.
    - This module only selects and renames keys; it never re-scores.

Invariant:
    `categories` and `scores` always contain exactly the keys in
    `MODERATION_CATEGORIES`. Categories the provider does not report (or a
    missing result altogether) default to `False` / `0.0`.
"""

from typing import Any

from app.core.types import ModerationVerdict
from app.llm.base import ModerationModel


# Wire key -> provider keys, first present wins.
MODERATION_CATEGORIES = {
    "sexual": ("sexual",),
    "hate": ("hate",),
    "harassment": ("harassment",),
    "selfHarm": ("self-harm", "self_harm", "selfHarm"),
    "violence": ("violence",),
    "pii": ("pii",),
}


def _pick(source: dict[str, Any] | None, keys, default):
    if not source:
        return default
    for key in keys:
        if source.get(key) is not None:
            return source[key]
    return default


def to_verdict(text: str, result: dict[str, Any] | None) -> ModerationVerdict:
    """Build a `ModerationVerdict` from a provider result (or `None`)."""
    result = result or {}
    categories = result.get("categories") or {}
    scores = result.get("category_scores") or {}

    return ModerationVerdict(
        text=text,
        flagged=bool(result.get("flagged", False)),
        categories={
            name: bool(_pick(categories, keys, False))
            for name, keys in MODERATION_CATEGORIES.items()
        },
        scores={
            name: float(_pick(scores, keys, 0.0))
            for name, keys in MODERATION_CATEGORIES.items()
        },
    )


def moderate(moderation_model: ModerationModel, text: str) -> ModerationVerdict:
    return to_verdict(text, moderation_model.moderate(text))
