"""Input normalization shared by gateway operations.

Rules:
    - Strings are trimmed.
    - Absent or all-whitespace strings count as missing.
    - Missing required values raise `GatewayError` of kind `REQUEST`.
    - Missing optional values resolve to a documented fallback.
"""

from app.core.errors import GatewayError


DEFAULT_TOP_K = 4


def has_text(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def normalize_text(value: str | None, fallback: str) -> str:
    """Trimmed `value`, or `fallback` when it is missing."""
    return value.strip() if has_text(value) else fallback


def require_text(value: str | None, field_name: str) -> str:
    """Trimmed `value`; raises a request error naming `field_name` when missing."""
    if not has_text(value):
        raise GatewayError.bad_request(f"{field_name} is required")
    return value.strip()


def resolve_top_k(top_k: int | None) -> int:
    """Requested `top_k`, or `DEFAULT_TOP_K` when absent or not positive."""
    if top_k is None or top_k <= 0:
        return DEFAULT_TOP_K
    return top_k
