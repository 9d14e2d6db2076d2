"""Epoch-millisecond timestamps and watermark helpers."""

from __future__ import annotations

from datetime import UTC, datetime

# Watermark used when the client has never pulled. Real watermarks are
# epoch milliseconds, so 1 matches every stored record.
FULL_SYNC_WATERMARK = 1


def now_ms() -> int:
    """Return the current wall-clock time in epoch milliseconds (UTC)."""
    return int(datetime.now(UTC).timestamp() * 1000)


def normalize_watermark(last_pulled_at: int | None) -> int:
    """Turn a client-supplied watermark into a queryable one.

    Args:
        last_pulled_at: Watermark from the client, or None on first sync.

    Returns:
        The watermark itself, or FULL_SYNC_WATERMARK when it is missing or 0.
    """
    if not last_pulled_at:
        return FULL_SYNC_WATERMARK
    return last_pulled_at
