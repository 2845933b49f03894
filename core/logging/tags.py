"""Standard logging tags for consistent log filtering.

Usage:
    from core.logging.tags import TAG_CYCLE
    logger.info("%s Cycle started", TAG_CYCLE)
"""

TAG_CYCLE = "[CYCLE]"
"""Cycle driver lifecycle: start, stop, iteration boundaries."""

TAG_OVERLAY = "[OVERLAY]"
"""Overlay surface show/hide/dismissal transitions."""

TAG_MEDIA = "[MEDIA]"
"""Media key injection."""

TAG_IMAGE = "[IMAGE]"
"""Image lookup and decoding."""

TAG_THREADING = "[THREADING]"
"""Thread pool and UI-thread dispatch."""

TAG_FALLBACK = "[FALLBACK]"
"""A degraded code path was taken (highlighted on the console)."""

__all__ = [
    "TAG_CYCLE",
    "TAG_OVERLAY",
    "TAG_MEDIA",
    "TAG_IMAGE",
    "TAG_THREADING",
    "TAG_FALLBACK",
]
