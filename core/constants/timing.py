"""Timing constants for FlashFrame.

All timing values are in milliseconds unless otherwise noted.
"""

# =============================================================================
# Cycle Defaults
# =============================================================================

DEFAULT_SHOW_DURATION_MS = 500
"""How long the overlay stays visible per iteration."""

DEFAULT_INTERVAL_MS = 5000
"""Wait between the end of one iteration and the next show."""

MIN_DURATION_MS = 1
"""Smallest accepted show duration or interval."""

MAX_DURATION_MS = 2**31 - 1
"""Largest accepted show duration or interval (Qt spin box limit)."""

# =============================================================================
# Threading
# =============================================================================

UI_CALL_TIMEOUT_MS = 5000
"""Maximum time a cycle thread waits for a call marshaled to the UI thread."""

# =============================================================================
# Media
# =============================================================================

MEDIA_COMMAND_TIMEOUT_MS = 2000
"""Hard timeout for external media helper processes (playerctl)."""
